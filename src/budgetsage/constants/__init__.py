"""Category and budgeting method catalogs."""
