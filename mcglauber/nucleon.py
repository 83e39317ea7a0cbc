"""A single nucleon inside a nucleus."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass
class Nucleon:
    """Position, isospin and collision count of one nucleon.

    ``type`` is 1 for a proton and 0 for a neutron.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    type: int = 0
    in_nucleus_a: bool = False
    ncoll: int = 0
    energy: float = 0.0

    @property
    def is_proton(self) -> bool:
        return self.type == 1

    @property
    def is_neutron(self) -> bool:
        return self.type == 0

    @property
    def in_nucleus_b(self) -> bool:
        return not self.in_nucleus_a

    @property
    def is_wounded(self) -> bool:
        return self.ncoll > 0

    @property
    def is_spectator(self) -> bool:
        return self.ncoll == 0

    def collide(self) -> None:
        """Record one more binary collision."""
        self.ncoll += 1

    def two_component_weight(self, x: float) -> float:
        """Two-component (participant/binary) weight for mixing fraction x."""
        return 2.0 * (0.5 * (1 - x) + 0.5 * x * self.ncoll)

    def reset(self) -> None:
        """Forget all collisions."""
        self.ncoll = 0

    def set_xyz(self, x: float, y: float, z: float) -> None:
        self.x, self.y, self.z = x, y, z

    def rotate(self, phi: float, theta: float) -> None:
        """Rotate so that the z axis points along direction (theta, phi)."""
        st = math.sin(theta)
        u1, u2, u3 = st * math.cos(phi), st * math.sin(phi), math.cos(theta)
        up = u1 * u1 + u2 * u2
        px, py, pz = self.x, self.y, self.z
        if up:
            up = math.sqrt(up)
            self.x = (u1 * u3 * px - u2 * py) / up + u1 * pz
            self.y = (u2 * u3 * px + u1 * py) / up + u2 * pz
            self.z = -up * px + u3 * pz
        elif u3 < 0:
            self.x = -px
            self.z = -pz

    def rotate_3d(self, psi_x: float, psi_y: float, psi_z: float) -> None:
        """Rotate about the x, then y, then z axis."""
        x, y, z = self.x, self.y, self.z
        c, s = math.cos(psi_x), math.sin(psi_x)
        y, z = c * y - s * z, s * y + c * z
        c, s = math.cos(psi_y), math.sin(psi_y)
        z, x = c * z - s * x, s * z + c * x
        c, s = math.cos(psi_z), math.sin(psi_z)
        x, y = c * x - s * y, s * x + c * y
        self.x, self.y, self.z = x, y, z