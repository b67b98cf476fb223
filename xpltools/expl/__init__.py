"""ExpL back end: syntax trees, symbol tables, type checking, heap routines and code generation."""