"""
Códigos de costo: codificación reversible del costo de un producto en letras

El costo (en unidades enteras de moneda) se imprime en el producto como un
código alfabético corto para que el personal de caja no lea el costo real.
Cada dígito se reemplaza por una letra y las secuencias de ceros se acortan
con dos códigos especiales (doble cero y triple cero).
"""

import math
from datetime import datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union


DIGITS = "0123456789"

DEFAULT_DIGIT_TO_LETTER = MappingProxyType({
    "1": "N",
    "2": "B",
    "3": "Q",
    "4": "M",
    "5": "F",
    "6": "Z",
    "7": "V",
    "8": "L",
    "9": "J",
    "0": "S",
})
DEFAULT_DOUBLE_ZERO_CODE = "SC"
DEFAULT_TRIPLE_ZERO_CODE = "SCS"

# Límite de dígitos de la conversión entero <-> texto de CPython (3.11+)
MAX_COST_DIGITS = 4300
_MAX_COST = 10 ** MAX_COST_DIGITS

Cost = Union[int, float, Decimal]


class InvalidCostCodeMapping(ValueError):
    """El mapeo de dígitos a letras no permite decodificar sin ambigüedad"""


def _is_upper_letters(value: Any) -> bool:
    return isinstance(value, str) and value.isalpha() and value.isupper()


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    return None


def validate_mapping(
    digit_to_letter: Mapping[str, str],
    double_zero_code: str,
    triple_zero_code: str
) -> None:
    """
    Validar que un mapeo sea biyectivo y que sus códigos de ceros no choquen
    con las letras de los dígitos durante la decodificación voraz

    Raises:
        InvalidCostCodeMapping: con la descripción del primer problema encontrado
    """
    keys = set(digit_to_letter)
    if keys != set(DIGITS):
        missing = sorted(set(DIGITS) - keys)
        extra = sorted(str(k) for k in keys - set(DIGITS))
        raise InvalidCostCodeMapping(
            f"El mapeo debe tener exactamente los dígitos 0-9 (faltan: {missing}, sobran: {extra})"
        )

    for digit in DIGITS:
        letter = digit_to_letter[digit]
        if not _is_upper_letters(letter) or len(letter) != 1:
            raise InvalidCostCodeMapping(
                f"La letra del dígito {digit} debe ser una sola letra mayúscula (recibido: {letter!r})"
            )

    seen: Dict[str, str] = {}
    for digit in DIGITS:
        letter = digit_to_letter[digit]
        if letter in seen:
            raise InvalidCostCodeMapping(
                f"Los dígitos {seen[letter]} y {digit} no pueden compartir la letra '{letter}'"
            )
        seen[letter] = digit

    zero_letter = digit_to_letter["0"]
    nonzero_letters = {digit_to_letter[d] for d in DIGITS[1:]}
    tokens = (("doble cero", double_zero_code), ("triple cero", triple_zero_code))

    for name, token in tokens:
        if not _is_upper_letters(token):
            raise InvalidCostCodeMapping(
                f"El código de {name} debe contener solo letras mayúsculas (recibido: {token!r})"
            )
        if token == zero_letter:
            raise InvalidCostCodeMapping(
                f"El código de {name} no puede ser igual a la letra del dígito 0"
            )
        if token[0] in nonzero_letters:
            raise InvalidCostCodeMapping(
                f"El código de {name} '{token}' no puede empezar con la letra de un dígito distinto de cero"
            )
        if any(char in nonzero_letters for char in token[1:]):
            raise InvalidCostCodeMapping(
                f"El código de {name} '{token}' solo puede continuar con la letra del 0 o letras sin dígito"
            )

    if double_zero_code == triple_zero_code:
        raise InvalidCostCodeMapping("Los códigos de doble y triple cero deben ser distintos")

    # El triple cero se busca primero: si fuera prefijo del doble, este nunca se leería
    if double_zero_code.startswith(triple_zero_code):
        raise InvalidCostCodeMapping(
            f"El código de triple cero '{triple_zero_code}' no puede ser prefijo del de doble cero '{double_zero_code}'"
        )


class CostCodeMapping:
    """
    Mapeo inmutable de dígitos a letras para códigos de costo

    Mapeo por defecto:
    - 1..9 → N, B, Q, M, F, Z, V, L, J
    - 0 → S
    - 00 → SC
    - 000 → SCS
    """

    __slots__ = (
        "_digit_to_letter",
        "_letter_to_digit",
        "_double_zero_code",
        "_triple_zero_code",
        "_updated_at",
        "_updated_by",
    )

    def __init__(
        self,
        digit_to_letter: Mapping[str, str],
        double_zero_code: str = DEFAULT_DOUBLE_ZERO_CODE,
        triple_zero_code: str = DEFAULT_TRIPLE_ZERO_CODE,
        updated_at: Optional[datetime] = None,
        updated_by: Optional[str] = None
    ):
        table = {str(digit): letter for digit, letter in dict(digit_to_letter).items()}
        validate_mapping(table, double_zero_code, triple_zero_code)

        reverse = {letter: digit for digit, letter in table.items()}
        reverse[double_zero_code] = "00"
        reverse[triple_zero_code] = "000"

        object.__setattr__(self, "_digit_to_letter", MappingProxyType(table))
        object.__setattr__(self, "_letter_to_digit", MappingProxyType(reverse))
        object.__setattr__(self, "_double_zero_code", double_zero_code)
        object.__setattr__(self, "_triple_zero_code", triple_zero_code)
        object.__setattr__(self, "_updated_at", updated_at)
        object.__setattr__(self, "_updated_by", updated_by)

    def __setattr__(self, name, value):
        raise AttributeError("CostCodeMapping es inmutable; use replace() para obtener una copia")

    def __delattr__(self, name):
        raise AttributeError("CostCodeMapping es inmutable")

    @classmethod
    def default(cls) -> "CostCodeMapping":
        """Crear el mapeo de códigos de costo por defecto"""
        return cls(
            DEFAULT_DIGIT_TO_LETTER,
            double_zero_code=DEFAULT_DOUBLE_ZERO_CODE,
            triple_zero_code=DEFAULT_TRIPLE_ZERO_CODE
        )

    @property
    def digit_to_letter(self) -> Mapping[str, str]:
        return self._digit_to_letter

    @property
    def letter_to_digit(self) -> Mapping[str, str]:
        """Mapeo inverso: letra → dígito, más los códigos de doble y triple cero"""
        return self._letter_to_digit

    @property
    def double_zero_code(self) -> str:
        return self._double_zero_code

    @property
    def triple_zero_code(self) -> str:
        return self._triple_zero_code

    @property
    def updated_at(self) -> Optional[datetime]:
        return self._updated_at

    @property
    def updated_by(self) -> Optional[str]:
        return self._updated_by

    def encode(self, cost: Cost) -> str:
        """
        Codificar un costo como código de letras

        Los decimales se truncan y los valores negativos se tratan como cero.
        Las secuencias de ceros se reemplazan de izquierda a derecha, primero
        por el código de triple cero y luego por el de doble cero.

        Args:
            cost: Costo a codificar (int, float o Decimal)

        Returns:
            Código de letras, ej. 125 → "NBF", 1000 → "NSCS"

        Raises:
            ValueError: si el costo es infinito, NaN o tiene más de MAX_COST_DIGITS dígitos
        """
        if isinstance(cost, bool) or not isinstance(cost, (int, float, Decimal)):
            raise TypeError(f"El costo debe ser numérico (recibido: {type(cost).__name__})")
        if isinstance(cost, float) and not math.isfinite(cost):
            raise ValueError(f"No se puede codificar un costo no finito: {cost}")
        if isinstance(cost, Decimal) and not cost.is_finite():
            raise ValueError(f"No se puede codificar un costo no finito: {cost}")
        if isinstance(cost, Decimal) and cost > 0 and cost.adjusted() >= MAX_COST_DIGITS:
            raise ValueError(f"El costo excede el máximo de {MAX_COST_DIGITS} dígitos")

        whole_cost = int(cost)  # int() trunca hacia cero
        if whole_cost <= 0:
            return self._digit_to_letter["0"]
        if whole_cost >= _MAX_COST:
            raise ValueError(f"El costo excede el máximo de {MAX_COST_DIGITS} dígitos")

        digits = str(whole_cost)
        tokens = []
        i = 0
        while i < len(digits):
            if digits.startswith("000", i):
                tokens.append(self._triple_zero_code)
                i += 3
            elif digits.startswith("00", i):
                tokens.append(self._double_zero_code)
                i += 2
            else:
                tokens.append(self._digit_to_letter[digits[i]])
                i += 1

        return "".join(tokens)

    def decode(self, code: str) -> Optional[int]:
        """
        Decodificar un código de letras al costo original

        Se prueba en cada posición el código de triple cero, luego el de doble
        cero y por último la letra individual.

        Args:
            code: Código a decodificar, ej. "MFZ"

        Returns:
            El costo entero, o None si el código es vacío, inválido o excede
            MAX_COST_DIGITS dígitos
        """
        if not isinstance(code, str) or not code:
            return None

        digits = []
        i = 0
        while i < len(code):
            if code.startswith(self._triple_zero_code, i):
                digits.append("000")
                i += len(self._triple_zero_code)
                continue

            if code.startswith(self._double_zero_code, i):
                digits.append("00")
                i += len(self._double_zero_code)
                continue

            digit = self._letter_to_digit.get(code[i])
            if digit is None:
                return None
            digits.append(digit)
            i += 1

        value = "".join(digits)
        if len(value) > MAX_COST_DIGITS:
            return None
        return int(value)

    def is_valid_code(self, code: str) -> bool:
        """Indica si el código se puede decodificar con este mapeo"""
        return self.decode(code) is not None

    def is_default(self) -> bool:
        return self == CostCodeMapping.default()

    def replace(self, **changes: Any) -> "CostCodeMapping":
        """Crear una copia validada con algunos campos modificados"""
        values = {
            "digit_to_letter": self._digit_to_letter,
            "double_zero_code": self._double_zero_code,
            "triple_zero_code": self._triple_zero_code,
            "updated_at": self._updated_at,
            "updated_by": self._updated_by,
        }
        unknown = set(changes) - set(values)
        if unknown:
            raise TypeError(f"Campos desconocidos: {sorted(unknown)}")
        values.update(changes)
        return CostCodeMapping(**values)

    def to_dict(self) -> Dict[str, Any]:
        """Convertir a documento (formato de almacenamiento de configuración)"""
        return {
            "digitToLetter": dict(self._digit_to_letter),
            "doubleZeroCode": self._double_zero_code,
            "tripleZeroCode": self._triple_zero_code,
            "updatedAt": self._updated_at.isoformat() if self._updated_at else None,
            "updatedBy": self._updated_by,
        }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "CostCodeMapping":
        """
        Crear un mapeo desde un documento almacenado

        Si el documento no trae letras se usa el mapeo por defecto; los
        códigos de ceros ausentes toman los valores por defecto.
        """
        data = data or {}
        raw_mapping = data.get("digitToLetter") or {}
        if not raw_mapping:
            return cls.default()
        if not isinstance(raw_mapping, Mapping):
            raise InvalidCostCodeMapping(
                f"digitToLetter debe ser un objeto dígito → letra (recibido: {type(raw_mapping).__name__})"
            )

        double_zero_code = data.get("doubleZeroCode")
        triple_zero_code = data.get("tripleZeroCode")
        return cls(
            {str(digit): str(letter) for digit, letter in raw_mapping.items()},
            double_zero_code=DEFAULT_DOUBLE_ZERO_CODE if double_zero_code is None else double_zero_code,
            triple_zero_code=DEFAULT_TRIPLE_ZERO_CODE if triple_zero_code is None else triple_zero_code,
            updated_at=_parse_timestamp(data.get("updatedAt")),
            updated_by=data.get("updatedBy")
        )

    def _key(self):
        return (
            tuple(self._digit_to_letter[d] for d in DIGITS),
            self._double_zero_code,
            self._triple_zero_code,
        )

    def __eq__(self, other):
        if not isinstance(other, CostCodeMapping):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        letters = "".join(self._digit_to_letter[d] for d in DIGITS)
        return (
            f"CostCodeMapping(letters={letters!r}, double_zero_code={self._double_zero_code!r}, "
            f"triple_zero_code={self._triple_zero_code!r})"
        )
