"""Biome profiles: JSON-described formulas that decide voxel density, type and shape."""

from __future__ import annotations

import json
import logging
import math
import random
import threading
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import Any, Callable, Generic, Mapping, Protocol, TypeVar

from .voxel_registry import VoxelRegistry
from .voxel_shapes import CUBE, SLAB, VoxelData, VoxelShape

logger = logging.getLogger(__name__)

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class FormulaError(ValueError):
    """A biome description or one of its formulas cannot be understood."""


@dataclass
class SampleContext:
    """Everything a formula may read while sampling one voxel."""

    position: tuple[int, int, int] = (0, 0, 0)
    depth: float = 0.0
    slope: tuple[float, float, float] = (0.0, 0.0, 0.0)
    moisture: float = 0.0
    temperature: float = 0.0
    density: float = 0.0


class Instruction(Protocol[T_co]):
    """A node of a compiled formula."""

    def process(self, context: SampleContext) -> T_co: ...


# Float semantics that yield NaN or infinity instead of raising.


def _div(a: float, b: float) -> float:
    try:
        return a / b
    except ZeroDivisionError:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)


def _fmod(a: float, b: float) -> float:
    try:
        return math.fmod(a, b)
    except ValueError:
        return math.nan


def _safe(func: Callable[[float], float]) -> Callable[[float], float]:
    def wrapped(x: float) -> float:
        try:
            return func(x)
        except ValueError:
            return math.nan

    return wrapped


def _floor(x: float) -> float:
    return float(math.floor(x)) if math.isfinite(x) else x


def _ceil(x: float) -> float:
    return float(math.ceil(x)) if math.isfinite(x) else x


def _round(x: float) -> float:
    """Round half away from zero."""
    if not math.isfinite(x):
        return x
    magnitude = abs(x)
    whole = math.floor(magnitude)
    if magnitude - whole >= 0.5:
        whole += 1
    return math.copysign(float(whole), x)


_BINARY_OPS: dict[str, Callable[[float, float], float]] = {
    "Add": lambda a, b: a + b,
    "Sub": lambda a, b: a - b,
    "Mul": lambda a, b: a * b,
    "Div": _div,
    "Mod": _fmod,
}

_UNARY_OPS: dict[str, Callable[[float], float]] = {
    "Sin": _safe(math.sin),
    "Cos": _safe(math.cos),
    "Floor": _floor,
    "Ceil": _ceil,
    "Round": _round,
}


@dataclass(frozen=True)
class Const(Generic[T]):
    value: T

    def process(self, context: SampleContext) -> T:
        return self.value


@dataclass(frozen=True)
class BinaryOp:
    op: Callable[[float, float], float]
    left: Instruction[float]
    right: Instruction[float]

    def process(self, context: SampleContext) -> float:
        return self.op(self.left.process(context), self.right.process(context))


@dataclass(frozen=True)
class UnaryOp:
    op: Callable[[float], float]
    operand: Instruction[float]

    def process(self, context: SampleContext) -> float:
        return self.op(self.operand.process(context))


@dataclass(frozen=True)
class If(Generic[T]):
    condition: Instruction[bool]
    then: Instruction[T]
    otherwise: Instruction[T]

    def process(self, context: SampleContext) -> T:
        if self.condition.process(context):
            return self.then.process(context)
        return self.otherwise.process(context)


@dataclass(frozen=True)
class Less:
    left: Instruction[float]
    right: Instruction[float]

    def process(self, context: SampleContext) -> bool:
        return self.left.process(context) < self.right.process(context)


@dataclass(frozen=True)
class ContextValue:
    read: Callable[[SampleContext], float]

    def process(self, context: SampleContext) -> float:
        return float(self.read(context))


_VARIABLES: dict[str, Callable[[SampleContext], float]] = {
    "Depth": lambda c: c.depth,
    "Moisture": lambda c: c.moisture,
    "Temperature": lambda c: c.temperature,
    "Density": lambda c: c.density,
    "X": lambda c: c.position[0],
    "Y": lambda c: c.position[1],
    "Z": lambda c: c.position[2],
}


# Gradient noise over a fixed, seeded permutation table.

_PERMUTATION = list(range(256))
random.Random(0).shuffle(_PERMUTATION)
_PERM = tuple(_PERMUTATION * 2)


def _fade(t: float) -> float:
    return t * t * t * (t * (t * 6 - 15) + 10)


def _lerp(t: float, a: float, b: float) -> float:
    return a + t * (b - a)


def _grad(h: int, x: float, y: float, z: float) -> float:
    h &= 15
    u = x if h < 8 else y
    if h < 4:
        v = y
    elif h in (12, 14):
        v = x
    else:
        v = z
    return (u if h & 1 == 0 else -u) + (v if h & 2 == 0 else -v)


def perlin3(x: float, y: float, z: float) -> float:
    """Gradient noise in [-1, 1]; zero at every integer lattice point."""
    if not (math.isfinite(x) and math.isfinite(y) and math.isfinite(z)):
        return math.nan
    fx, fy, fz = math.floor(x), math.floor(y), math.floor(z)
    xi, yi, zi = fx & 255, fy & 255, fz & 255
    x, y, z = x - fx, y - fy, z - fz
    u, v, w = _fade(x), _fade(y), _fade(z)
    p = _PERM
    a = p[xi] + yi
    aa, ab = p[a] + zi, p[a + 1] + zi
    b = p[xi + 1] + yi
    ba, bb = p[b] + zi, p[b + 1] + zi
    return _lerp(
        w,
        _lerp(
            v,
            _lerp(u, _grad(p[aa], x, y, z), _grad(p[ba], x - 1, y, z)),
            _lerp(u, _grad(p[ab], x, y - 1, z), _grad(p[bb], x - 1, y - 1, z)),
        ),
        _lerp(
            v,
            _lerp(u, _grad(p[aa + 1], x, y, z - 1), _grad(p[ba + 1], x - 1, y, z - 1)),
            _lerp(u, _grad(p[ab + 1], x, y - 1, z - 1), _grad(p[bb + 1], x - 1, y - 1, z - 1)),
        ),
    )


@dataclass(frozen=True)
class Simplex:
    """Noise sampled at the context position, scaled by an amplitude."""

    frequency: float
    amplitude: float

    @classmethod
    def from_wavelength(cls, wavelength: float, amplitude: float) -> Simplex:
        return cls(_div(1.0, wavelength), amplitude)

    def process(self, context: SampleContext) -> float:
        px, py, pz = context.position
        f = self.frequency
        return perlin3(px * f, py * f, pz * f) * self.amplitude


# Formula parsing.

Fields = Mapping[str, Instruction[float]]


def split_params(text: str) -> list[str]:
    """Split the text after an opening parenthesis into trimmed top-level arguments.

    Scanning stops at the matching closing parenthesis; an argument that is
    never closed is dropped.
    """
    params: list[str] = []
    current: list[str] = []
    depth = 0
    for char in text:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        if depth == -1:
            params.append("".join(current).strip())
            break
        if depth == 0 and char == ",":
            params.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    return params


def _call(instruction: str) -> tuple[str, list[str]]:
    name, sep, data = instruction.partition("(")
    if not sep:
        raise FormulaError(f"expected an instruction call, got {instruction!r}")
    return name, split_params(data)


def _param(params: list[str], index: int, name: str) -> str:
    try:
        return params[index]
    except IndexError:
        raise FormulaError(f"instruction {name!r} is missing argument {index + 1}") from None


def _parse_number(text: str) -> float | None:
    if not text or text != text.strip() or "_" in text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def build_bool_instruction(instruction: str, fields: Fields) -> Instruction[bool]:
    """Compile a condition; only Less(a, b) is understood."""
    name, params = _call(instruction)
    if name == "Less":
        return Less(
            build_f32_instruction(_param(params, 0, name), fields),
            build_f32_instruction(_param(params, 1, name), fields),
        )
    raise FormulaError(f"unable to process given instruction: {name}")


def build_f32_instruction(instruction: str, fields: Fields) -> Instruction[float]:
    """Compile a numeric formula: a number, a named sampler, a variable or a call."""
    number = _parse_number(instruction)
    if number is not None:
        return Const(number)
    if instruction in fields:
        return fields[instruction]
    if "(" not in instruction:
        reader = _VARIABLES.get(instruction)
        if reader is None:
            raise FormulaError(
                f"constant variable {instruction!r} was not found while constructing "
                "f32 instruction"
            )
        return ContextValue(reader)

    name, params = _call(instruction)
    if name == "If":
        return If(
            build_bool_instruction(_param(params, 0, name), fields),
            build_f32_instruction(_param(params, 1, name), fields),
            build_f32_instruction(_param(params, 2, name), fields),
        )
    if name in _BINARY_OPS:
        return BinaryOp(
            _BINARY_OPS[name],
            build_f32_instruction(_param(params, 0, name), fields),
            build_f32_instruction(_param(params, 1, name), fields),
        )
    if name in _UNARY_OPS:
        return UnaryOp(_UNARY_OPS[name], build_f32_instruction(_param(params, 0, name), fields))
    raise FormulaError(f"unable to process given instruction for type f32: {name}")


def build_voxel_type_instruction(
    instruction: str, fields: Fields, registry: VoxelRegistry
) -> Instruction[int]:
    """Compile a formula that yields a voxel id: Voxel(name) or If(...)."""
    name, params = _call(instruction)
    if name == "If":
        return If(
            build_bool_instruction(_param(params, 0, name), fields),
            build_voxel_type_instruction(_param(params, 1, name), fields, registry),
            build_voxel_type_instruction(_param(params, 2, name), fields, registry),
        )
    if name == "Voxel":
        voxel_name = _param(params, 0, name)
        profile = registry.get_by_name(voxel_name)
        if profile is None:
            raise FormulaError(f"voxel {voxel_name!r} is not registered")
        return Const(profile.id)
    raise FormulaError(f"unable to process given instruction: {name}")


_SHAPE_CONSTANTS: dict[str, VoxelShape] = {"CUBE": CUBE, "SLAB": SLAB}


def build_voxel_shape_instruction(instruction: str, fields: Fields) -> Instruction[VoxelShape]:
    """Compile a formula that yields a shape: CUBE, SLAB or If(...)."""
    if "(" not in instruction:
        shape = _SHAPE_CONSTANTS.get(instruction)
        if shape is None:
            raise FormulaError(f"shape {instruction!r} is not defined")
        return Const(shape)
    name, params = _call(instruction)
    if name == "If":
        return If(
            build_bool_instruction(_param(params, 0, name), fields),
            build_voxel_shape_instruction(_param(params, 1, name), fields),
            build_voxel_shape_instruction(_param(params, 2, name), fields),
        )
    raise FormulaError(f"unable to process given instruction: {name}")


def _get(obj: Any, key: str) -> Any:
    if not isinstance(obj, dict) or key not in obj:
        raise FormulaError(f"missing field {key!r}")
    return obj[key]


def _get_str(obj: Any, key: str) -> str:
    value = _get(obj, key)
    if not isinstance(value, str):
        raise FormulaError(f"field {key!r} must be a string")
    return value


def _get_number(obj: Any, key: str) -> float:
    value = _get(obj, key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise FormulaError(f"field {key!r} must be a number")
    return float(value)


class BiomeProfile:
    """Compiled density, voxel-type and shape formulas of one biome."""

    def __init__(
        self,
        density_formula: Instruction[float],
        id_formula: Instruction[int],
        shape_formula: Instruction[VoxelShape],
    ) -> None:
        self.density_formula = density_formula
        self.id_formula = id_formula
        self.shape_formula = shape_formula

    @classmethod
    def from_json(cls, data: str, registry: VoxelRegistry) -> BiomeProfile:
        """Compile a biome from its JSON description."""
        try:
            document = json.loads(data)
        except json.JSONDecodeError as exc:
            raise FormulaError(f"biome description is not valid JSON: {exc}") from exc
        samplers = _get(document, "Samplers")
        if not isinstance(samplers, list):
            raise FormulaError("field 'Samplers' must be an array")
        fields: dict[str, Instruction[float]] = {}
        for sampler in samplers:
            kind = _get_str(sampler, "Type")
            name = _get_str(sampler, "Name")
            if kind == "Simplex":
                fields[name] = Simplex.from_wavelength(
                    _get_number(sampler, "Wavelength"), _get_number(sampler, "Amplitude")
                )
            elif kind == "Formula":
                fields[name] = build_f32_instruction(_get_str(sampler, "Formula"), fields)
            else:
                raise FormulaError(f"field type is not supported: {kind}")
        return cls(
            build_f32_instruction(_get_str(document, "Voxel Density"), fields),
            build_voxel_type_instruction(_get_str(document, "Voxel Type"), fields, registry),
            build_voxel_shape_instruction(_get_str(document, "Voxel Shape"), fields),
        )

    def sample_density(self, context: SampleContext) -> float:
        return self.density_formula.process(context)

    def sample_voxel(self, context: SampleContext) -> VoxelData:
        return VoxelData(
            shape=self.shape_formula.process(context),
            state=0,
            id=self.id_formula.process(context),
        )


def load_biomes(
    directory: str | PathLike[str], registry: VoxelRegistry
) -> dict[str, BiomeProfile]:
    """Compile every biome description in a directory, keyed by file name."""
    biomes: dict[str, BiomeProfile] = {}
    for path in sorted(Path(directory).iterdir()):
        name = path.name.replace(".json", "")
        biomes[name] = BiomeProfile.from_json(path.read_text(encoding="utf-8"), registry)
        logger.info("created biome profile %s", name)
    return biomes


class BiomeLibrary:
    """Thread-safe set of biome profiles loaded from a directory."""

    def __init__(self, directory: str | PathLike[str], registry: VoxelRegistry) -> None:
        self._directory = Path(directory)
        self._registry = registry
        self._lock = threading.Lock()
        self._biomes = load_biomes(self._directory, registry)

    def reload(self) -> None:
        """Read the directory again, replacing every profile."""
        biomes = load_biomes(self._directory, self._registry)
        with self._lock:
            self._biomes = biomes

    def get(self, name: str) -> BiomeProfile | None:
        with self._lock:
            return self._biomes.get(name)