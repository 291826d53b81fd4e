"""Tests para modelos de módulo."""

from conftest import make_record

from training_hub.core.module import (
    ModulePatch,
    NamedRef,
    PersistedTrainingModule,
    TranslatableText,
    default_training_module,
    is_valid_training_type,
    parse_timestamp,
    update_translation,
)
from training_hub.core.progress import UserProgress, find_progress


class TestPersistedModule:
    """Tests para la forma almacenada."""

    def test_serialization_keeps_storage_keys(self) -> None:
        """Test claves camelCase y versión."""
        record = make_record("maps", steps=2, pages=1)
        module = PersistedTrainingModule.from_dict(record)

        assert module.version == 1
        assert module.name.key == "maps-name"
        assert len(module.contents.steps) == 2
        assert module.to_dict() == record

    def test_missing_optional_fields_take_defaults(self) -> None:
        """Test campos opcionales ausentes."""
        module = PersistedTrainingModule.from_dict(
            {
                "_version": 1,
                "id": "x",
                "name": {"key": "x-name"},
                "contents": {"welcome": {"key": "x-welcome"}},
            }
        )

        assert module.public_access == "--------"
        assert module.translation.provider == "NONE"
        assert module.contents.steps == []
        assert module.user is None

    def test_iter_texts_covers_every_localized_node(self) -> None:
        """Test recorrido de nodos localizables."""
        record = make_record("maps", steps=2, pages=2)
        record["contents"]["steps"][0]["subtitle"] = {"key": "maps-sub-0"}
        module = PersistedTrainingModule.from_dict(record)

        keys = [text.key for text in module.iter_texts()]
        assert keys[:2] == ["maps-name", "maps-welcome"]
        assert "maps-sub-0" in keys
        # name + welcome + 2 títulos + 1 subtítulo + 4 páginas
        assert len(keys) == 9

    def test_update_translation_returns_copy(self) -> None:
        """Test actualizar valor de referencia por clave."""
        module = PersistedTrainingModule.from_dict(make_record("maps"))
        updated = update_translation(module, "maps-page-0-0", "Nuevo texto")

        assert updated.contents.steps[0].pages[0].reference_value == "Nuevo texto"
        assert module.contents.steps[0].pages[0].reference_value == "Page 0.0"


class TestModulePatch:
    """Tests para el parche de actualización."""

    def test_explicit_fields_override_defaults(self) -> None:
        """Test campos explícitos del parche."""
        patch = ModulePatch(
            id="m1",
            name=TranslatableText(key="m1-name", reference_value="M1"),
            dhis_authorities=["F_A"],
        )
        module = patch.apply(default_training_module())

        assert module.id == "m1"
        assert module.name.reference_value == "M1"
        assert module.dhis_authorities == ["F_A"]
        assert module.type == "app"
        assert module.public_access == "--------"

    def test_unset_fields_keep_base(self) -> None:
        """Test campos sin valor conservan la base."""
        base = default_training_module()
        base.user = NamedRef(id="author")
        base.created = "2020-01-01T00:00:00+00:00"

        module = ModulePatch(id="m1", name=TranslatableText(key="k")).apply(base)

        assert module.user == NamedRef(id="author")
        assert module.created == "2020-01-01T00:00:00+00:00"


class TestHelpers:
    """Tests para funciones auxiliares."""

    def test_training_types(self) -> None:
        """Test tipos de módulo válidos."""
        assert is_valid_training_type("core")
        assert not is_valid_training_type("unknown")
        assert not is_valid_training_type(None)

    def test_parse_timestamp_accepts_z_suffix(self) -> None:
        """Test fechas con sufijo Z."""
        parsed = parse_timestamp("2020-01-01T10:00:00.000Z")
        assert parsed is not None
        assert parsed.hour == 10
        assert parsed.utcoffset().total_seconds() == 0
        assert parse_timestamp("") is None

    def test_default_progress(self) -> None:
        """Test progreso por defecto."""
        snapshot = [UserProgress(id="maps", last_step=3, completed=True)]

        assert find_progress(snapshot, "maps").last_step == 3
        assert find_progress(snapshot, "other") == UserProgress(id="other")
        assert find_progress(None, "other").completed is False
