"""Galaxy composition: quotas, generator order and exact-count backfill."""

import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

import numpy as np

from config import galaxy as config
from .accumulator import StarAccumulator
from .colors import parse_hex_color
from .config import GalaxyConfig
from .records import StarRecord, StructureType
from .sampler import RandomPlacementSampler
from .structures import (
    GenerationContext,
    generate_globular_clusters,
    generate_halo,
    generate_halo_filler,
    generate_main_galaxy,
    generate_outer_disk,
)


@dataclass
class GalaxyData:
    """
    One generated galaxy snapshot.

    ``positions``, ``colors`` and ``sizes`` are parallel to ``stars`` and
    ready for batched point rendering.
    """
    stars: Tuple[StarRecord, ...]
    positions: np.ndarray      # (N, 3) float32
    colors: np.ndarray         # (N, 3) float32
    sizes: np.ndarray          # (N,) float32
    forced_placements: int = 0
    config: Optional[GalaxyConfig] = field(default=None, repr=False)

    def __len__(self) -> int:
        return len(self.stars)

    def structure_counts(self) -> Dict[StructureType, int]:
        return dict(Counter(star.structure for star in self.stars))

    def texture_groups(self) -> Dict[int, np.ndarray]:
        """Star indices grouped by texture index, one batch per texture."""
        num_textures = config.TEXTURES["num_common"] + config.TEXTURES["num_rare"]
        indices = np.array([star.texture_index for star in self.stars], dtype=np.int32)
        groups = {}
        for texture_index in range(num_textures):
            members = np.nonzero(indices == texture_index)[0]
            if len(members) > 0:
                groups[texture_index] = members
        return groups


class GalaxyComposer:
    """
    Runs the structure generators in a fixed order.

    Order: main galaxy (bar, bulge, arms, disk) -> outer disk -> halo ->
    globular clusters -> halo filler. Each generator sees every star placed
    before it during rejection sampling, so the order affects the result.
    """

    def __init__(self, cfg: Optional[GalaxyConfig] = None,
                 rng: Optional[np.random.Generator] = None):
        self.cfg = cfg if cfg is not None else GalaxyConfig()
        self.cfg.validate()
        self.rng = rng if rng is not None else np.random.default_rng(self.cfg.seed)

    def _context(self) -> GenerationContext:
        sampler = RandomPlacementSampler(
            self.cfg.min_star_distance_squared,
            self.cfg.max_placement_attempts,
        )
        return GenerationContext(
            config=self.cfg,
            rng=self.rng,
            sampler=sampler,
            color_in=parse_hex_color(self.cfg.color_in_hex),
            color_out=parse_hex_color(self.cfg.color_out_hex),
        )

    def compose(self) -> GalaxyData:
        cfg = self.cfg
        quotas = cfg.quotas()
        ctx = self._context()
        accumulator = StarAccumulator(cfg.num_stars)
        start = time.perf_counter()

        generate_main_galaxy(accumulator, quotas["main"], ctx)
        generate_outer_disk(accumulator, quotas["outer_disk"], ctx)
        generate_halo(accumulator, quotas["halo"], ctx)
        generate_globular_clusters(accumulator, quotas["globular_cluster"], ctx)

        shortfall = cfg.num_stars - accumulator.count()
        if shortfall > 0:
            generate_halo_filler(accumulator, shortfall, ctx)

        elapsed = time.perf_counter() - start
        forced = ctx.sampler.forced_count
        print(f"[Galaxy] Generated {accumulator.count():,} stars in {elapsed:.2f}s "
              f"(main={quotas['main']:,}, outer={quotas['outer_disk']:,}, "
              f"halo={quotas['halo']:,}, clusters={quotas['globular_cluster']:,}, "
              f"filler={max(shortfall, 0):,})")
        if forced:
            print(f"[Galaxy] {forced:,} stars force-placed after "
                  f"{cfg.max_placement_attempts} attempts")

        return GalaxyData(
            stars=tuple(accumulator.stars),
            positions=accumulator.positions(),
            colors=accumulator.colors(),
            sizes=accumulator.sizes(),
            forced_placements=forced,
            config=cfg,
        )


def generate_galaxy(cfg: Optional[GalaxyConfig] = None,
                    rng: Optional[np.random.Generator] = None) -> GalaxyData:
    """Generate a galaxy with the given (or default) configuration."""
    return GalaxyComposer(cfg, rng).compose()
