"""
Material library parser.

Supports YAML or JSON material libraries:

Example material file:
```yaml
materials:
  ground:
    type: lambertian
    albedo: [0.5, 0.5, 0.5]

  mirror:
    type: metal
    albedo: "#cccccc"

  glass:
    type: dielectric
    refractive_index: 1.5
```

A document without a ``materials`` key is read as the materials section
itself. ``ior`` is accepted as an alias for ``refractive_index``.
"""

from __future__ import annotations
from pathlib import Path
from typing import Dict, Any, Union
import json
import logging

import yaml

from .vec3 import Color
from .materials import Material, Lambertian, Metal, Dielectric

logger = logging.getLogger(__name__)


class MaterialParseError(Exception):
    """Error during material parsing."""
    pass


class MaterialParser:
    """Parser for material library files."""

    def __init__(self):
        self.materials: Dict[str, Material] = {}

    def parse_file(self, filepath: Union[str, Path]) -> Dict[str, Material]:
        """Parse a material library file.

        Args:
            filepath: Path to the library (YAML or JSON)

        Returns:
            Materials keyed by name
        """
        path = Path(filepath)
        if not path.exists():
            raise MaterialParseError(f"Material file not found: {filepath}")

        try:
            content = path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise MaterialParseError(f"Cannot read material file {filepath}: {e}") from e

        try:
            if path.suffix == '.json':
                data = json.loads(content)
            else:
                # YAML is a superset of JSON, so it also covers unknown suffixes
                data = yaml.safe_load(content)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise MaterialParseError(f"Cannot read material file {filepath}: {e}") from e

        materials = self.parse_dict(data)
        logger.info("Loaded %d materials from %s", len(materials), path)
        return materials

    def parse_dict(self, data: Any) -> Dict[str, Material]:
        """Parse a material library from a dictionary.

        Args:
            data: Either ``{'materials': {...}}`` or the materials mapping itself

        Returns:
            Materials keyed by name
        """
        if not isinstance(data, dict):
            raise MaterialParseError(
                f"Material library must be a mapping, got {type(data).__name__}"
            )

        section = data.get('materials', data)
        if not isinstance(section, dict):
            raise MaterialParseError("'materials' must be a mapping of name to definition")

        for name, mat_data in section.items():
            self.materials[str(name)] = self.parse_material(mat_data, name=str(name))

        return self.materials

    def parse_material(self, mat_data: Any, name: str = '<inline>') -> Material:
        """Build a single material from its definition."""
        if not isinstance(mat_data, dict):
            raise MaterialParseError(f"Material '{name}' must be a mapping, got: {mat_data}")

        mat_type = str(mat_data.get('type', 'lambertian')).lower()

        try:
            if mat_type == 'lambertian':
                albedo = self._parse_color(mat_data.get('albedo', [0.5, 0.5, 0.5]))
                return Lambertian(albedo)

            elif mat_type == 'metal':
                albedo = self._parse_color(mat_data.get('albedo', [0.8, 0.8, 0.8]))
                return Metal(albedo)

            elif mat_type == 'dielectric':
                ri = mat_data.get('refractive_index', mat_data.get('ior', 1.5))
                return Dielectric(self._parse_float(ri))

        except MaterialParseError as e:
            raise MaterialParseError(f"Material '{name}': {e}") from e
        except (TypeError, ValueError) as e:
            raise MaterialParseError(f"Material '{name}' is invalid: {e}") from e

        raise MaterialParseError(f"Unknown material type for '{name}': {mat_type}")

    def _parse_float(self, data: Any) -> float:
        if isinstance(data, bool) or not isinstance(data, (int, float, str)):
            raise MaterialParseError(f"Expected a number, got: {data!r}")
        try:
            return float(data)
        except ValueError:
            raise MaterialParseError(f"Expected a number, got: {data!r}") from None

    def _parse_color(self, data: Any) -> Color:
        """Parse a Color from various formats."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise MaterialParseError(f"Color must have 3 components, got {len(data)}")
            return Color(*(self._parse_float(c) for c in data))
        elif isinstance(data, dict):
            return Color(
                self._parse_float(data.get('r', 0)),
                self._parse_float(data.get('g', 0)),
                self._parse_float(data.get('b', 0))
            )
        elif isinstance(data, str):
            # Handle hex colors
            if data.startswith('#') and len(data) == 7:
                try:
                    r = int(data[1:3], 16) / 255.0
                    g = int(data[3:5], 16) / 255.0
                    b = int(data[5:7], 16) / 255.0
                except ValueError:
                    pass
                else:
                    return Color(r, g, b)
            raise MaterialParseError(f"Cannot parse color from string: {data}")
        else:
            raise MaterialParseError(f"Cannot parse Color from: {data}")


def load_materials(filepath: Union[str, Path]) -> Dict[str, Material]:
    """Convenience function to load a material library file."""
    return MaterialParser().parse_file(filepath)


def parse_materials(data: Dict[str, Any]) -> Dict[str, Material]:
    """Convenience function to parse a material library from a dictionary."""
    return MaterialParser().parse_dict(data)


def parse_material(data: Dict[str, Any]) -> Material:
    """Convenience function to parse one inline material definition."""
    return MaterialParser().parse_material(data)
