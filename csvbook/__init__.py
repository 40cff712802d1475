"""csvbook: convert delimited text files into formatted spreadsheet workbooks."""

__version__ = "0.1.0"
