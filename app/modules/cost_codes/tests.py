"""
Tests para el módulo de Códigos de Costo

Cubren:
- Codificación y decodificación con el mapeo por defecto
- Ida y vuelta (decode(encode(v)) == v) en un rango amplio de costos
- Truncamiento de decimales y costos negativos
- Mapeos personalizados y validación de mapeos ambiguos
- Serialización del mapeo a documento
- Servicio y endpoints /cost-codes
"""

import pytest
from datetime import datetime
from decimal import Decimal
from fastapi import HTTPException
from sqlalchemy.exc import OperationalError

from app.modules.cost_codes.codec import (
    CostCodeMapping,
    InvalidCostCodeMapping,
    DEFAULT_DIGIT_TO_LETTER,
    MAX_COST_DIGITS,
)
from app.modules.cost_codes.models import CostCodeSetting, CostCodeChangeLog, CostCodeAction
from app.modules.cost_codes.schemas import CostCodeMappingIn
from app.modules.cost_codes.service import CostCodeService


# ===== FIXTURES =====

@pytest.fixture
def mapping():
    return CostCodeMapping.default()


@pytest.fixture
def letters_mapping():
    """Mapeo personalizado A-I para 1-9 y O para 0"""
    return CostCodeMapping(
        {
            "1": "A", "2": "B", "3": "C", "4": "D", "5": "E",
            "6": "F", "7": "G", "8": "H", "9": "I", "0": "O",
        },
        double_zero_code="OO",
        triple_zero_code="OOO"
    )


@pytest.fixture
def custom_payload():
    return {
        "digit_to_letter": {
            "1": "A", "2": "B", "3": "C", "4": "D", "5": "E",
            "6": "F", "7": "G", "8": "H", "9": "I", "0": "O",
        },
        "double_zero_code": "OX",
        "triple_zero_code": "OXO",
        "updated_by": "owner-1"
    }


def round_trip_values():
    values = set(range(0, 20001))
    values.update(range(0, 10_000_001, 997))
    for digit in range(1, 10):
        for zeros in range(0, 8):
            values.add(digit * 10 ** zeros)
            values.add(digit * 10 ** zeros + 1)
    values.update([
        10_000_000, 9_999_999, 1_000_001, 1_001_001, 1_010_101,
        1_000_100, 1_100_000, 2_000_500, 3_000_050, 9_000_009,
    ])
    return sorted(values)


class BrokenSession:
    """Sesión que simula la base de datos caída"""

    def query(self, *args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is down"))

    def rollback(self):
        pass


# ===== TESTS DEL MAPEO POR DEFECTO =====

class TestDefaultMapping:
    """Tests para CostCodeMapping.default()"""

    def test_default_letters(self, mapping):
        """Test letras por defecto de cada dígito"""
        assert dict(mapping.digit_to_letter) == {
            "1": "N", "2": "B", "3": "Q", "4": "M", "5": "F",
            "6": "Z", "7": "V", "8": "L", "9": "J", "0": "S",
        }
        assert mapping.double_zero_code == "SC"
        assert mapping.triple_zero_code == "SCS"

    def test_letter_to_digit(self, mapping):
        """Test mapeo inverso incluyendo códigos de ceros"""
        reverse = mapping.letter_to_digit
        for digit, letter in DEFAULT_DIGIT_TO_LETTER.items():
            assert reverse[letter] == digit
        assert reverse["SC"] == "00"
        assert reverse["SCS"] == "000"
        assert len(reverse) == 12

    def test_mapping_is_immutable(self, mapping):
        """Test que el mapeo no se puede modificar"""
        with pytest.raises(AttributeError):
            mapping.double_zero_code = "XX"
        with pytest.raises(TypeError):
            mapping.digit_to_letter["1"] = "X"
        with pytest.raises(TypeError):
            mapping.letter_to_digit["X"] = "1"

    def test_default_instances_are_equal(self, mapping):
        """Test igualdad sin considerar metadatos"""
        stamped = mapping.replace(updated_by="user-1", updated_at=datetime(2024, 1, 1))
        assert mapping == CostCodeMapping.default()
        assert stamped == mapping
        assert hash(stamped) == hash(mapping)
        assert stamped.is_default()


# ===== TESTS DE CODIFICACIÓN =====

class TestEncode:
    """Tests para CostCodeMapping.encode"""

    def test_single_digits(self, mapping):
        assert [mapping.encode(d) for d in range(1, 10)] == list("NBQMFZVLJ")

    def test_zero(self, mapping):
        assert mapping.encode(0) == "S"

    def test_multi_digit(self, mapping):
        assert mapping.encode(12) == "NB"
        assert mapping.encode(125) == "NBF"
        assert mapping.encode(456) == "MFZ"
        assert mapping.encode(789) == "VLJ"
        assert mapping.encode(999) == "JJJ"

    def test_single_zero(self, mapping):
        assert mapping.encode(10) == "NS"
        assert mapping.encode(101) == "NSN"
        assert mapping.encode(1050) == "NSFS"

    def test_double_zero(self, mapping):
        """Test reemplazo de '00' por SC"""
        assert mapping.encode(100) == "NSC"
        assert mapping.encode(500) == "FSC"
        assert mapping.encode(1200) == "NBSC"
        assert mapping.encode(1001) == "NSCN"
        assert mapping.encode(2005) == "BSCF"

    def test_triple_zero_has_priority(self, mapping):
        """Test que '000' usa SCS y no SC + S"""
        assert mapping.encode(1000) == "NSCS"
        assert mapping.encode(12000) == "NBSCS"
        assert mapping.encode(10001) == "NSCSN"

    def test_mixed_zero_runs(self, mapping):
        """Test secuencias largas de ceros (izquierda a derecha)"""
        assert mapping.encode(10000) == "NSCSS"
        assert mapping.encode(100000) == "NSCSSC"
        assert mapping.encode(1000000) == "NSCSSCS"
        assert mapping.encode(20500) == "BSFSC"
        assert mapping.encode(50000) == "FSCSS"
        assert mapping.encode(30050) == "QSCFS"
        assert mapping.encode(10101) == "NSNSN"

    def test_truncates_decimals(self, mapping):
        """Test que los decimales se truncan, no se redondean"""
        assert mapping.encode(125.99) == "NBF"
        assert mapping.encode(125.01) == "NBF"
        assert mapping.encode(125.5) == "NBF"
        assert mapping.encode(Decimal("999.999")) == "JJJ"
        assert mapping.encode(0.9) == "S"
        for value in (0.5, 1.25, 99.99, 1000.5, 30050.75):
            assert mapping.encode(value) == mapping.encode(int(value))

    def test_negative_as_zero(self, mapping):
        """Test que los costos negativos se codifican como cero"""
        assert mapping.encode(-1) == "S"
        assert mapping.encode(-100) == "S"
        assert mapping.encode(-0.5) == "S"
        assert mapping.encode(Decimal("-12.5")) == mapping.encode(0)

    def test_non_finite_cost(self, mapping):
        """Test que infinito y NaN no se pueden codificar"""
        with pytest.raises(ValueError):
            mapping.encode(float("inf"))
        with pytest.raises(ValueError):
            mapping.encode(float("nan"))
        with pytest.raises(ValueError):
            mapping.encode(Decimal("NaN"))

    def test_cost_digit_limit(self, mapping):
        """Test costos hasta MAX_COST_DIGITS dígitos; más grandes se rechazan"""
        largest = 10 ** MAX_COST_DIGITS - 1
        code = mapping.encode(largest)
        assert code == "J" * MAX_COST_DIGITS
        assert mapping.decode(code) == largest

        with pytest.raises(ValueError, match="máximo"):
            mapping.encode(10 ** MAX_COST_DIGITS)
        with pytest.raises(ValueError, match="máximo"):
            mapping.encode(10 ** 5000)
        with pytest.raises(ValueError, match="máximo"):
            mapping.encode(Decimal("1E+5000"))
        assert mapping.encode(Decimal("-1E+5000")) == "S"

    def test_non_numeric_cost(self, mapping):
        with pytest.raises(TypeError):
            mapping.encode("125")

    def test_code_length(self, mapping):
        """Test longitud entre ceil(dígitos/3) y dígitos"""
        for value in (1, 10, 100, 1000, 123456, 1000000, 9999999):
            digits = len(str(value))
            code = mapping.encode(value)
            assert -(-digits // 3) <= len(code) <= digits
            assert code.isalpha() and code.isupper()


# ===== TESTS DE DECODIFICACIÓN =====

class TestDecode:
    """Tests para CostCodeMapping.decode"""

    def test_single_letters(self, mapping):
        for digit, letter in DEFAULT_DIGIT_TO_LETTER.items():
            assert mapping.decode(letter) == int(digit)

    def test_multi_letter(self, mapping):
        assert mapping.decode("NBF") == 125
        assert mapping.decode("MFZ") == 456
        assert mapping.decode("JJJ") == 999

    def test_zero_codes(self, mapping):
        assert mapping.decode("NSC") == 100
        assert mapping.decode("NSCN") == 1001
        assert mapping.decode("NSCS") == 1000
        assert mapping.decode("NSCSN") == 10001

    def test_mixed_zero_runs(self, mapping):
        assert mapping.decode("NSCSS") == 10000
        assert mapping.decode("NSCSSC") == 100000
        assert mapping.decode("NSCSSCS") == 1000000
        assert mapping.decode("BSFSC") == 20500
        assert mapping.decode("FSCSS") == 50000
        assert mapping.decode("QSCFS") == 30050

    def test_invalid_codes(self, mapping):
        """Test que los códigos inválidos devuelven None"""
        assert mapping.decode("") is None
        assert mapping.decode("X") is None
        assert mapping.decode("NAX") is None
        assert mapping.decode("ABC") is None
        assert mapping.decode("123") is None
        assert mapping.decode("NX") is None
        assert mapping.decode("NC") is None
        assert mapping.decode("nbf") is None
        assert mapping.decode(None) is None

    def test_oversized_code(self, mapping):
        """Test que un código con más de MAX_COST_DIGITS dígitos devuelve None"""
        assert mapping.decode("N" * 5000) is None
        assert mapping.is_valid_code("N" * 5000) is False
        assert mapping.decode("S" * (MAX_COST_DIGITS + 1)) is None
        assert mapping.decode("SCS" * 1500) is None
        assert mapping.decode("N" * MAX_COST_DIGITS) == int("1" * MAX_COST_DIGITS)
        assert mapping.is_valid_code("N" * MAX_COST_DIGITS) is True

    def test_is_valid_code_matches_decode(self, mapping):
        """Test que is_valid_code coincide exactamente con decode"""
        codes = [
            "", "X", "NAX", "ABC", "123", "XYZ", "NX", "nbf",
            "N", "NBF", "NSC", "NSCS", "NSCSNBF", "NSCSS", "NSCSSC", "MFZ", "QSCFS",
        ]
        for code in codes:
            assert mapping.is_valid_code(code) == (mapping.decode(code) is not None)
        assert mapping.is_valid_code("NSCSNBF") is True
        assert mapping.is_valid_code("") is False
        assert mapping.is_valid_code("NAX") is False


# ===== TESTS DE IDA Y VUELTA =====

class TestRoundTrip:
    """Tests para decode(encode(v)) == v"""

    def test_default_mapping(self, mapping):
        for value in round_trip_values():
            code = mapping.encode(value)
            assert mapping.decode(code) == value, f"value={value}, code={code}"

    def test_letters_mapping(self, letters_mapping):
        assert letters_mapping.encode(123) == "ABC"
        assert letters_mapping.encode(100) == "AOO"
        assert letters_mapping.encode(1000) == "AOOO"
        assert letters_mapping.decode("AOOO") == 1000
        for value in range(0, 200001, 7):
            assert letters_mapping.decode(letters_mapping.encode(value)) == value

    @pytest.mark.parametrize("double_zero_code, triple_zero_code", [
        ("X", "Y"),
        ("X", "XX"),
        ("KS", "KSK"),
        ("SK", "SKS"),
        ("SS", "SCS"),
    ])
    def test_custom_zero_codes(self, double_zero_code, triple_zero_code):
        """Test ida y vuelta con códigos de ceros que pasan la validación"""
        custom = CostCodeMapping(
            DEFAULT_DIGIT_TO_LETTER,
            double_zero_code=double_zero_code,
            triple_zero_code=triple_zero_code
        )
        for digit in range(1, 10):
            for zeros in range(0, 9):
                value = digit * 10 ** zeros
                assert custom.decode(custom.encode(value)) == value
        for value in range(0, 120001, 11):
            assert custom.decode(custom.encode(value)) == value


# ===== TESTS DE VALIDACIÓN DEL MAPEO =====

class TestMappingValidation:
    """Tests para mapeos personalizados inválidos"""

    def _letters(self, **changes):
        letters = dict(DEFAULT_DIGIT_TO_LETTER)
        letters.update(changes)
        return letters

    def test_missing_digit(self):
        letters = self._letters()
        del letters["9"]
        with pytest.raises(InvalidCostCodeMapping, match="0-9"):
            CostCodeMapping(letters)

    def test_extra_key(self):
        letters = self._letters(A="X")
        with pytest.raises(InvalidCostCodeMapping):
            CostCodeMapping(letters)

    def test_duplicate_letter(self):
        letters = self._letters(**{"2": "N"})
        with pytest.raises(InvalidCostCodeMapping, match="no pueden compartir"):
            CostCodeMapping(letters)

    @pytest.mark.parametrize("letter", ["n", "NN", "", "1", 5])
    def test_letter_must_be_single_uppercase(self, letter):
        letters = self._letters(**{"5": letter})
        with pytest.raises(InvalidCostCodeMapping):
            CostCodeMapping(letters)

    @pytest.mark.parametrize("double_zero_code, triple_zero_code", [
        ("", "SCS"),          # vacío
        ("SC", ""),
        ("sc", "SCS"),        # minúsculas
        ("SC", "SC"),         # iguales
        ("S", "SCS"),         # igual a la letra del 0
        ("NS", "SCS"),        # empieza con letra de dígito distinto de cero
        ("SN", "SCS"),        # continúa con letra de dígito distinto de cero
        ("SC", "SCN"),
        ("SCS", "SC"),        # triple es prefijo del doble
    ])
    def test_ambiguous_zero_codes(self, double_zero_code, triple_zero_code):
        """Test que se rechazan códigos de ceros que romperían la decodificación"""
        with pytest.raises(InvalidCostCodeMapping):
            CostCodeMapping(
                DEFAULT_DIGIT_TO_LETTER,
                double_zero_code=double_zero_code,
                triple_zero_code=triple_zero_code
            )

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            CostCodeMapping({})

    def test_replace_validates(self, mapping):
        changed = mapping.replace(double_zero_code="SK", triple_zero_code="SKS")
        assert changed.encode(100) == "NSK"
        assert mapping.encode(100) == "NSC"
        with pytest.raises(InvalidCostCodeMapping):
            mapping.replace(triple_zero_code="SC")
        with pytest.raises(TypeError):
            mapping.replace(letters="ABC")


# ===== TESTS DE SERIALIZACIÓN =====

class TestSerialization:
    """Tests para to_dict / from_dict"""

    def test_to_dict(self, mapping):
        stamped = mapping.replace(updated_at=datetime(2024, 5, 1, 10, 30), updated_by="user-1")
        data = stamped.to_dict()
        assert data["digitToLetter"]["1"] == "N"
        assert data["doubleZeroCode"] == "SC"
        assert data["tripleZeroCode"] == "SCS"
        assert data["updatedAt"] == "2024-05-01T10:30:00"
        assert data["updatedBy"] == "user-1"

    def test_from_dict_round_trip(self, letters_mapping):
        stamped = letters_mapping.replace(updated_at=datetime(2024, 5, 1), updated_by="user-2")
        restored = CostCodeMapping.from_dict(stamped.to_dict())
        assert restored == letters_mapping
        assert restored.updated_at == datetime(2024, 5, 1)
        assert restored.updated_by == "user-2"

    def test_from_dict_defaults(self):
        """Test documento vacío o incompleto"""
        assert CostCodeMapping.from_dict(None).is_default()
        assert CostCodeMapping.from_dict({}).is_default()
        assert CostCodeMapping.from_dict({"digitToLetter": {}}).is_default()

        restored = CostCodeMapping.from_dict({
            "digitToLetter": dict(DEFAULT_DIGIT_TO_LETTER),
            "updatedAt": "not-a-date",
        })
        assert restored.double_zero_code == "SC"
        assert restored.triple_zero_code == "SCS"
        assert restored.updated_at is None

    def test_from_dict_invalid(self):
        with pytest.raises(InvalidCostCodeMapping):
            CostCodeMapping.from_dict({"digitToLetter": {"1": "N"}})

    @pytest.mark.parametrize("raw_letters", [["N", "B"], "NBQ", 12])
    def test_from_dict_letters_not_an_object(self, raw_letters):
        with pytest.raises(InvalidCostCodeMapping):
            CostCodeMapping.from_dict({"digitToLetter": raw_letters})


# ===== TESTS DE SERVICIOS =====

class TestCostCodeService:
    """Tests para CostCodeService"""

    def test_default_when_not_stored(self, db):
        service = CostCodeService(db)
        assert service.get_mapping().is_default()
        assert service.encode_cost(125) == "NBF"
        assert service.decode_code("MFZ") == 456
        assert service.validate_code("NAX") is False

    def test_update_mapping(self, db, custom_payload):
        service = CostCodeService(db)
        saved = service.update_mapping(CostCodeMappingIn(**custom_payload))

        assert saved.updated_by == "owner-1"
        assert saved.updated_at is not None
        assert service.get_mapping() == saved
        assert service.encode_cost(1000) == "AOXO"
        assert service.decode_code("AOXO") == 1000
        assert db.query(CostCodeSetting).count() == 1

        log = db.query(CostCodeChangeLog).one()
        assert log.action == CostCodeAction.UPDATED
        assert log.user_id == "owner-1"
        assert log.snapshot["tripleZeroCode"] == "OXO"

    def test_update_twice_keeps_single_row(self, db, custom_payload):
        service = CostCodeService(db)
        service.update_mapping(CostCodeMappingIn(**custom_payload))
        custom_payload["double_zero_code"] = "OK"
        custom_payload["triple_zero_code"] = "OKO"
        service.update_mapping(CostCodeMappingIn(**custom_payload))

        assert db.query(CostCodeSetting).count() == 1
        assert db.query(CostCodeChangeLog).count() == 2
        assert service.get_mapping().double_zero_code == "OK"

    def test_reset_to_default(self, db, custom_payload):
        service = CostCodeService(db)
        service.update_mapping(CostCodeMappingIn(**custom_payload))

        mapping = service.reset_to_default("admin-1")
        assert mapping.is_default()
        assert mapping.updated_by == "admin-1"
        assert service.get_mapping().is_default()

        changes = service.list_changes()
        assert changes["total"] == 2
        assert changes["changes"][0].action == CostCodeAction.RESET
        assert changes["changes"][1].action == CostCodeAction.UPDATED

    def test_reset_when_already_default(self, db):
        service = CostCodeService(db)
        assert service.reset_to_default("admin-1").is_default()
        assert db.query(CostCodeChangeLog).count() == 0
        assert db.query(CostCodeSetting).count() == 0

    def test_preview(self, db):
        service = CostCodeService(db)
        preview = service.preview()
        assert preview["is_default"] is True
        assert preview["rows"] == [
            {"cost": 125, "code": "NBF"},
            {"cost": 1000, "code": "NSCS"},
            {"cost": 500, "code": "FSC"},
            {"cost": 99, "code": "JJ"},
            {"cost": 1234, "code": "NBQM"},
        ]
        assert service.preview([20500])["rows"] == [{"cost": 20500, "code": "BSFSC"}]

    def test_storage_failure_falls_back_to_default(self):
        """Test que codificar no falla si la base de datos no responde"""
        service = CostCodeService(BrokenSession())
        assert service.encode_cost(125) == "NBF"
        assert service.decode_code("QSCFS") == 30050
        assert service.validate_code("X") is False

        with pytest.raises(HTTPException) as exc:
            service.get_mapping()
        assert exc.value.status_code == 500

    def test_corrupt_stored_mapping(self, db):
        db.add(CostCodeSetting(
            key="cost_code_mapping",
            digit_to_letter={"1": "N"},
            double_zero_code="SC",
            triple_zero_code="SCS"
        ))
        db.commit()

        service = CostCodeService(db)
        with pytest.raises(HTTPException) as exc:
            service.get_mapping()
        assert exc.value.status_code == 500
        assert service.encode_cost(100) == "NSC"

    def test_stored_letters_not_an_object(self, db):
        """Test letras guardadas como lista en lugar de objeto"""
        db.add(CostCodeSetting(
            key="cost_code_mapping",
            digit_to_letter=["N", "B", "Q"],
            double_zero_code="SC",
            triple_zero_code="SCS"
        ))
        db.commit()

        service = CostCodeService(db)
        with pytest.raises(HTTPException) as exc:
            service.get_mapping()
        assert exc.value.status_code == 500
        assert service.encode_cost(100) == "NSC"
        assert service.decode_code("MFZ") == 456

    def test_encode_cost_too_large(self, db):
        service = CostCodeService(db)
        with pytest.raises(HTTPException) as exc:
            service.encode_cost(10 ** MAX_COST_DIGITS)
        assert exc.value.status_code == 422


# ===== TESTS DE ENDPOINTS =====

class TestCostCodeEndpoints:
    """Tests para los endpoints /cost-codes"""

    def test_get_default_mapping(self, client):
        response = client.get("/cost-codes/mapping")
        assert response.status_code == 200
        data = response.json()
        assert data["is_default"] is True
        assert data["digit_to_letter"]["0"] == "S"
        assert data["letter_to_digit"]["SCS"] == "000"
        assert data["updated_by"] is None

    def test_update_mapping(self, client, custom_payload):
        response = client.put("/cost-codes/mapping", json=custom_payload)
        assert response.status_code == 200
        data = response.json()
        assert data["is_default"] is False
        assert data["double_zero_code"] == "OX"
        assert data["updated_by"] == "owner-1"

        response = client.get("/cost-codes/mapping")
        assert response.json()["digit_to_letter"]["1"] == "A"

        response = client.post("/cost-codes/encode", json={"cost": 100})
        assert response.json() == {"cost": "100", "code": "AOX"}

    def test_update_normalizes_case(self, client, custom_payload):
        custom_payload["digit_to_letter"] = {k: v.lower() for k, v in custom_payload["digit_to_letter"].items()}
        custom_payload["double_zero_code"] = " ox "
        response = client.put("/cost-codes/mapping", json=custom_payload)
        assert response.status_code == 200
        assert response.json()["digit_to_letter"]["1"] == "A"
        assert response.json()["double_zero_code"] == "OX"

    def test_update_invalid_mapping(self, client, custom_payload):
        custom_payload["digit_to_letter"]["2"] = "A"
        response = client.put("/cost-codes/mapping", json=custom_payload)
        assert response.status_code == 422

        custom_payload["digit_to_letter"]["2"] = "B"
        custom_payload["double_zero_code"] = "AO"
        response = client.put("/cost-codes/mapping", json=custom_payload)
        assert response.status_code == 422

        assert client.get("/cost-codes/mapping").json()["is_default"] is True

    def test_reset_mapping(self, client, custom_payload):
        client.put("/cost-codes/mapping", json=custom_payload)
        response = client.post("/cost-codes/mapping/reset", json={"updated_by": "admin-1"})
        assert response.status_code == 200
        assert response.json()["is_default"] is True
        assert response.json()["updated_by"] == "admin-1"

        response = client.post("/cost-codes/mapping/reset")
        assert response.status_code == 200

        response = client.get("/cost-codes/changes")
        data = response.json()
        assert data["total"] == 2
        assert [c["action"] for c in data["changes"]] == ["reset", "updated"]
        assert data["changes"][0]["user_id"] == "admin-1"

    def test_changes_pagination(self, client, custom_payload):
        for code in ("OX", "OK", "OJ"):
            custom_payload["double_zero_code"] = code
            custom_payload["triple_zero_code"] = code + "O"
            client.put("/cost-codes/mapping", json=custom_payload)

        response = client.get("/cost-codes/changes", params={"limit": 2, "offset": 0})
        data = response.json()
        assert data["total"] == 3
        assert len(data["changes"]) == 2
        assert data["changes"][0]["snapshot"]["doubleZeroCode"] == "OJ"

        response = client.get("/cost-codes/changes", params={"limit": 0})
        assert response.status_code == 422

    def test_encode(self, client):
        assert client.post("/cost-codes/encode", json={"cost": 125}).json()["code"] == "NBF"
        assert client.post("/cost-codes/encode", json={"cost": 125.99}).json()["code"] == "NBF"
        assert client.post("/cost-codes/encode", json={"cost": -5}).json()["code"] == "S"
        assert client.post("/cost-codes/encode", json={"cost": 10000}).json()["code"] == "NSCSS"
        assert client.post("/cost-codes/encode", json={"cost": "abc"}).status_code == 422

    def test_encode_large_integer_is_exact(self, client):
        """Test que costos mayores a 2**53 no pierden precisión"""
        cost = 9007199254740993
        response = client.post("/cost-codes/encode", json={"cost": cost})
        assert response.status_code == 200
        data = response.json()
        assert data["cost"] == "9007199254740993"
        assert data["code"] == CostCodeMapping.default().encode(cost)

        response = client.post("/cost-codes/decode", json={"code": data["code"]})
        assert response.json()["cost"] == cost

    def test_encode_cost_too_large(self, client):
        response = client.post("/cost-codes/encode", json={"cost": "1E+5000"})
        assert response.status_code == 422

    def test_decode(self, client):
        response = client.post("/cost-codes/decode", json={"code": "QSCFS"})
        assert response.status_code == 200
        assert response.json() == {"code": "QSCFS", "cost": 30050, "valid": True}

        response = client.post("/cost-codes/decode", json={"code": "NAX"})
        assert response.status_code == 200
        assert response.json() == {"code": "NAX", "cost": None, "valid": False}

        response = client.post("/cost-codes/decode", json={"code": ""})
        assert response.json()["valid"] is False

    def test_validate(self, client):
        assert client.get("/cost-codes/validate/NSCS").json() == {"code": "NSCS", "valid": True}
        assert client.get("/cost-codes/validate/X").json() == {"code": "X", "valid": False}

    def test_validate_long_code(self, client):
        """Test códigos largos: hasta 100 caracteres se validan, más se rechazan"""
        response = client.get("/cost-codes/validate/" + "N" * 100)
        assert response.status_code == 200
        assert response.json()["valid"] is True

        response = client.get("/cost-codes/validate/" + "N" * 5000)
        assert response.status_code == 422

    def test_preview(self, client):
        response = client.get("/cost-codes/preview")
        assert response.status_code == 200
        rows = response.json()["rows"]
        assert rows[0] == {"cost": 125, "code": "NBF"}
        assert rows[1] == {"cost": 1000, "code": "NSCS"}

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"
