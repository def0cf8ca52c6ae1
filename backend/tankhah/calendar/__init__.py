"""
Calendar module.
- jalali: Gregorian <-> Jalali conversion, formatting, month grids
- numerals: Persian / Arabic-Indic digit conversion
"""
