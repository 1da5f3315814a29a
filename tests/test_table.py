import pytest

import glgen


def test_enum_key_equality_uses_name_and_api() -> None:
    assert glgen.EnumKey("GL_X") == glgen.EnumKey("GL_X", None)
    assert glgen.EnumKey("GL_X", "gl") != glgen.EnumKey("GL_X", "gles2")
    assert glgen.EnumKey("GL_X", "gl") != glgen.EnumKey("GL_X")
    assert len({glgen.EnumKey("GL_X", "gl"), glgen.EnumKey("GL_X", "gles2")}) == 2


def test_insert_new_key_returns_true() -> None:
    table = glgen.EnumTable()
    key = glgen.EnumKey("GL_TRIANGLES")

    assert table.insert(key, glgen.Enumerant(4)) is True
    assert key in table
    assert table.get(key) == glgen.Enumerant(4)
    assert len(table) == 1


def test_insert_same_pair_twice_is_idempotent() -> None:
    table = glgen.EnumTable()
    key = glgen.EnumKey("GL_TRIANGLES")
    table.insert(key, glgen.Enumerant(4))

    assert table.insert(key, glgen.Enumerant(4)) is False
    assert table.items() == [(key, glgen.Enumerant(4))]


def test_insert_conflicting_value_raises_and_keeps_original() -> None:
    table = glgen.EnumTable()
    key = glgen.EnumKey("GL_TRIANGLES")
    table.insert(key, glgen.Enumerant(4))

    with pytest.raises(glgen.ConflictingRedefinition) as exc_info:
        table.insert(key, glgen.Enumerant(5))

    err = exc_info.value
    assert err.code == "CONFLICTING_REDEFINITION"
    assert err.key == key
    assert err.old == glgen.Enumerant(4)
    assert err.new == glgen.Enumerant(5)
    assert table.get(key) == glgen.Enumerant(4)


def test_insert_same_bits_different_variant_is_a_conflict() -> None:
    table = glgen.EnumTable()
    key = glgen.EnumKey("GL_DEPTH_BUFFER_BIT")
    table.insert(key, glgen.Bitmask(0x100))

    with pytest.raises(glgen.ConflictingRedefinition):
        table.insert(key, glgen.Enumerant(0x100))


def test_api_variants_coexist_with_different_values() -> None:
    table = glgen.EnumTable()
    table.insert(glgen.EnumKey("GL_ACTIVE_PROGRAM_EXT", "gl"), glgen.Enumerant(0x8B8D))
    table.insert(
        glgen.EnumKey("GL_ACTIVE_PROGRAM_EXT", "gles2"), glgen.Enumerant(0x8259)
    )

    assert len(table) == 2


def test_sorted_items_orders_by_name_then_api() -> None:
    table = glgen.EnumTable()
    table.insert(glgen.EnumKey("GL_B", "gles2"), glgen.Enumerant(2))
    table.insert(glgen.EnumKey("GL_A"), glgen.Enumerant(1))
    table.insert(glgen.EnumKey("GL_B"), glgen.Enumerant(3))
    table.insert(glgen.EnumKey("GL_B", "gl"), glgen.Enumerant(4))

    keys = [key for key, _ in table.sorted_items()]

    assert keys == [
        glgen.EnumKey("GL_A"),
        glgen.EnumKey("GL_B"),
        glgen.EnumKey("GL_B", "gl"),
        glgen.EnumKey("GL_B", "gles2"),
    ]
    assert list(table) == [
        glgen.EnumKey("GL_B", "gles2"),
        glgen.EnumKey("GL_A"),
        glgen.EnumKey("GL_B"),
        glgen.EnumKey("GL_B", "gl"),
    ]


def test_merge_adds_new_keys_and_skips_equal_ones() -> None:
    left = glgen.EnumTable()
    left.insert(glgen.EnumKey("GL_A"), glgen.Enumerant(1))
    right = glgen.EnumTable()
    right.insert(glgen.EnumKey("GL_A"), glgen.Enumerant(1))
    right.insert(glgen.EnumKey("GL_B"), glgen.Bitmask(2))

    assert left.merge(right) == 1
    assert left.get(glgen.EnumKey("GL_B")) == glgen.Bitmask(2)


def test_merge_applies_conflict_rule() -> None:
    left = glgen.EnumTable()
    left.insert(glgen.EnumKey("GL_A"), glgen.Enumerant(1))
    right = glgen.EnumTable()
    right.insert(glgen.EnumKey("GL_A"), glgen.Enumerant(2))

    with pytest.raises(glgen.ConflictingRedefinition):
        left.merge(right)

    assert left.get(glgen.EnumKey("GL_A")) == glgen.Enumerant(1)


def test_registry_error_base_rejects_unknown_code() -> None:
    with pytest.raises(ValueError):
        glgen.RegistryError("no code")


def test_registry_error_str_includes_line_when_known() -> None:
    err = glgen.MissingAttribute("value", line=12)

    assert str(err).endswith("(line 12)")
    assert err.message in str(err)
