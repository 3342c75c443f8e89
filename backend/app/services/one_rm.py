def estimate_one_rep_max(weight: float, reps: float) -> float:
    """
    Epley estimate of a one-rep max from a single performed set.
    No validation: callers drop failed or non-finite sets first.
    """
    return weight * (1 + reps / 30)
