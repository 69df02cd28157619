"""Define the interface for drawing addressable random choices.

Every random choice made by the simulation goes through a `Sampler` under a unique,
stable site name (e.g. "day0_F1_A1_A2_travel_time"). The default implementation
delegates to pyro, so the simulation can be run under any pyro effect handler
(trace, replay, condition, seed, ...) by downstream inference code.
"""
import abc
from typing import Optional

import pyro
import pyro.distributions as dist
import torch

# Smallest scale used for normal distributions, so that a zero nominal value does
# not produce a degenerate distribution.
MIN_SCALE = 1e-6


class SiteCollisionError(RuntimeError):
    """Raised when two random choices request the same site name."""


class Sampler(abc.ABC):
    """Draws random choices at uniquely named sites.

    Each sampler keeps track of the site names it has used, and refuses to reuse
    one, since that would make the resulting trace ambiguous.
    """

    def __init__(self):
        self._site_names: set[str] = set()

    @property
    def site_names(self) -> frozenset[str]:
        """The names of all sites drawn so far."""
        return frozenset(self._site_names)

    def reset(self) -> None:
        """Forget all previously used site names."""
        self._site_names.clear()

    def sample(
        self,
        name: str,
        distribution: dist.Distribution,
        obs: Optional[torch.Tensor] = None,
    ) -> torch.Tensor:
        """Draw a value from a distribution at the named site.

        Args:
            name: the unique name of the site.
            distribution: the distribution to draw from.
            obs: an optional observed value for this site.

        Raises:
            SiteCollisionError: if the site name has already been used.
        """
        self._register(name)
        if obs is not None:
            obs = torch.as_tensor(obs)
        return self._sample(name, distribution, obs)

    def deterministic(self, name: str, value) -> torch.Tensor:
        """Record a deterministic value at the named site.

        Args:
            name: the unique name of the site.
            value: the value to record.

        Raises:
            SiteCollisionError: if the site name has already been used.
        """
        self._register(name)
        return self._deterministic(name, torch.as_tensor(value))

    def _register(self, name: str) -> None:
        if name in self._site_names:
            raise SiteCollisionError(f"Site {name!r} has already been sampled")
        self._site_names.add(name)

    @abc.abstractmethod
    def _sample(
        self,
        name: str,
        distribution: dist.Distribution,
        obs: Optional[torch.Tensor],
    ) -> torch.Tensor:
        raise NotImplementedError

    @abc.abstractmethod
    def _deterministic(self, name: str, value: torch.Tensor) -> torch.Tensor:
        raise NotImplementedError


class PyroSampler(Sampler):
    """A sampler that draws from pyro's global random state."""

    def _sample(self, name, distribution, obs):
        return pyro.sample(name, distribution, obs=obs)

    def _deterministic(self, name, value):
        return pyro.deterministic(name, value)


def uniform(low, high) -> dist.Distribution:
    """Uniform distribution on [low, high)."""
    return dist.Uniform(torch.as_tensor(float(low)), torch.as_tensor(float(high)))


def exponential(mean) -> dist.Distribution:
    """Exponential distribution parameterized by its mean."""
    return dist.Exponential(1.0 / torch.as_tensor(mean))


def normal(loc, scale) -> dist.Distribution:
    """Normal distribution with a scale bounded away from zero."""
    return dist.Normal(loc, torch.clamp(torch.as_tensor(scale), min=MIN_SCALE))
