"""SPL back end: registers, paths, labels, constants, aliases and code generation."""