KG_PER_LB = 0.45359237  # avoirdupois pound

def lb_to_kg(lb: float) -> float:
    return lb * KG_PER_LB

def to_kg(weight: float, unit: str) -> float:
    if unit == "kg":
        return weight
    if unit == "lb":
        return lb_to_kg(weight)
    raise ValueError(f"unknown unit: {unit}")
