# Analysis package
