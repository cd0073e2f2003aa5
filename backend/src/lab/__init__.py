"""Lab state: scenarios and the interactive session record."""
