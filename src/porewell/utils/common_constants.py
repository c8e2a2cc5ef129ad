"""
The module gives access to a set of unified units and physical constants.

To access the quantities, invoke pw.KEY.

All quantities are expressed in SI units, thus multiplying a value by a unit converts
it to SI, and dividing an SI value by a unit converts it back for display.

"""

""" Units """
# SI Prefixes
NANO = 1e-9
MICRO = 1e-6
MILLI = 1e-3
CENTI = 1e-2
DECI = 1e-1
KILO = 1e3
MEGA = 1e6
GIGA = 1e9

# Time
SECOND = 1.0
MINUTE = 60 * SECOND
HOUR = 60 * MINUTE
DAY = 24 * HOUR
YEAR = 365 * DAY

# Weight
KILOGRAM = 1.0
GRAM = 1e-3 * KILOGRAM

# Length
METER = 1.0
CENTIMETER = CENTI * METER
MILLIMETER = MILLI * METER
KILOMETER = KILO * METER

# Pressure related quantities
DARCY = 9.869233e-13
MILLIDARCY = MILLI * DARCY

PASCAL = 1.0
BAR = 100000 * PASCAL
ATMOSPHERIC_PRESSURE = 101325 * PASCAL

# Viscosity
POISE = 0.1 * PASCAL * SECOND

GRAVITY_ACCELERATION = 9.80665 * METER / SECOND**2
