"""Workbook file adapter (pandas): raw tables in and out of .xlsx/.csv files."""
