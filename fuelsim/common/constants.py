"""
Model defaults for the fuel station simulation.

Times are in seconds of simulated time, volumes in litres, money in dollars.
"""

# Economics
PROFIT_PER_LITRE = 0.025   # profit per litre of fuel sold
PUMP_COST = 20.0           # flat daily cost per pump

# Fuel demand ~ Uniform(LITRES_MIN, LITRES_MIN + LITRES_RANGE)
LITRES_MIN = 10.0
LITRES_RANGE = 50.0

# Service time = base + per_litre * litres + spread * N(0, 1)
SERVICE_BASE = 150.0
SERVICE_PER_LITRE = 0.5
SERVICE_SPREAD = 30.0
MIN_SERVICE_TIME = 0.1

# P(not balk) = (A + litres) / (B * (C + queue_length))
BALK_A = 40.0
BALK_B = 25.0
BALK_C = 3.0

MEAN_INTERARRIVAL = 50.0

# Rendered in place of undefined ratios
UNKNOWN = "Unknown"
