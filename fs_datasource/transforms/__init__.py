"""
Transforms sub-package for fs-datasource.

Contains small, independently testable steps applied to parsed data:
  - numbers.py: Coerce numeric-looking text cells to int/float.

The changes -> series reshaping lives with the table model
(``fs_datasource.table.process_changes``) because its output type is
part of that model.
"""
