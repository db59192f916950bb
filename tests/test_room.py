import pytest

from roomplan import Room, ValidationError


def _record():
    return {
        "name": "  Bedroom ",
        "vertices": [{"x": 0, "y": 0}, {"x": 4, "y": 0}, {"x": 4, "y": 3}, {"x": 0, "y": 3}],
        "angleConstraints": [{"vertexIndex": 1, "degrees": 90}],
        "lengthConstraints": [{"i": 3, "j": 0, "meters": 3}],
        "offset": {"x": 10, "y": 5},
        "floorType": "carpet",
    }


def test_from_dict_normalizes_record():
    room = Room.from_dict(_record())

    assert room.name == "Bedroom"
    assert room.vertices == [(0.0, 0.0), (4.0, 0.0), (4.0, 3.0), (0.0, 3.0)]
    assert room.angle_constraints == {1: 90.0}
    assert room.length_constraints == {(0, 3): 3.0}
    assert room.offset == (10.0, 5.0)
    assert room.floor_type == "carpet"
    assert room.notes is None


def test_from_dict_rejects_invalid_record():
    record = _record()
    record["vertices"] = record["vertices"][:2]

    with pytest.raises(ValidationError):
        Room.from_dict(record)


def test_to_dict_includes_measurements_and_optional_fields():
    room = Room.from_dict(_record())
    room.notes = "north facing"
    payload = room.to_dict()

    assert payload["name"] == "Bedroom"
    assert payload["vertices"][2] == {"x": 4.0, "y": 3.0}
    assert payload["angleConstraints"] == [{"vertexIndex": 1, "degrees": 90.0}]
    assert payload["lengthConstraints"] == [{"i": 0, "j": 3, "meters": 3.0}]
    assert payload["offset"] == {"x": 10.0, "y": 5.0}
    assert payload["notes"] == "north facing"
    assert payload["floorType"] == "carpet"
    assert payload["measurements"]["trueArea"] == pytest.approx(12.0)
    assert payload["measurements"]["truePerimeter"] == pytest.approx(14.0)


def test_to_dict_omits_unset_optional_fields():
    room = Room(name="Closet", vertices=[(0.0, 0.0), (1.0, 0.0), (0.0, 1.0)])
    payload = room.to_dict()

    assert "notes" not in payload
    assert "floorType" not in payload


def test_dict_form_loads_back_to_same_room():
    room = Room.from_dict(_record())
    again = Room.from_dict(room.to_dict())

    assert again == room


def test_translated_vertices_apply_offset():
    room = Room.from_dict(_record())

    assert room.translated_vertices()[0] == (10.0, 5.0)
    assert room.translated_vertices()[2] == (14.0, 8.0)


def test_engine_edits_flow_back_into_room():
    room = Room.from_dict(_record())
    engine = room.to_engine()

    engine.insert_vertex(0, (2.0, -0.5))
    engine.move_vertex(4, (0.2, 3.5))
    room.update_from_engine(engine)

    assert len(room.vertices) == 5
    assert room.angle_constraints == {2: 90.0}
    assert room.length_constraints == {(0, 4): 3.0}
    assert room.vertices[1] == (2.0, -0.5)


def test_to_engine_enforces_stored_lengths():
    record = _record()
    record["lengthConstraints"].append({"i": 0, "j": 1, "meters": 5})
    room = Room.from_dict(record)

    engine = room.to_engine()

    assert engine.edge_length(0, 1) == pytest.approx(5.0, abs=1e-6)
    assert engine.edge_length(0, 3) == pytest.approx(3.0, abs=1e-6)
    assert engine.interior_angle(1) == pytest.approx(90.0, abs=1e-4)
    assert engine.move_vertex(3, (0.2, 3.5)).accepted
