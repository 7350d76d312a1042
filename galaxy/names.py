"""Random star names."""

import numpy as np

PREFIXES = ("Alpha", "Beta", "Gamma", "Delta", "Epsilon",
            "Zeta", "Eta", "Theta", "Iota", "Kappa")
SUFFIXES = ("Centauri", "Reticuli", "Orionis", "Draconis",
            "Lyrae", "Cygnus", "Aquilae", "Pegasi")


def random_star_name(rng: np.random.Generator) -> str:
    prefix = PREFIXES[int(rng.integers(len(PREFIXES)))]
    suffix = SUFFIXES[int(rng.integers(len(SUFFIXES)))]
    return f"{prefix} {suffix} {int(rng.integers(1000))}"
