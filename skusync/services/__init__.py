"""Core services: binding, SKU generation, reactivity, validation and workbook facade."""
