import json

from conftest import make_task

from skillrpg.fighters.models import Fighter
from skillrpg.skills.seed import build_seed_tree
from skillrpg.storage.export import (
    EXPORT_VERSION,
    ExportData,
    export_to_csv,
    export_to_json,
    import_from_json,
)


def _data():
    return ExportData(
        tree=build_seed_tree(),
        fighters=[Fighter(id="f1", name="Ivan", callsign="Hawk", unit="Alpha")],
        fighter_skill_levels={"f1": {"skill_recon": 2}},
        xp_ledger={"f1": {"skill_recon": 130}},
        tasks=[make_task(skill_id="skill_recon")],
    )


def test_json_export_import():
    payload = export_to_json(_data())
    raw = json.loads(payload)
    assert raw["version"] == EXPORT_VERSION
    assert isinstance(raw["exportedAt"], int)
    assert raw["fighters"][0]["callsign"] == "Hawk"

    imported = import_from_json(payload)
    assert imported.tree == build_seed_tree()
    assert imported.fighters == _data().fighters
    assert imported.xp_ledger == {"f1": {"skill_recon": 130}}
    assert imported.tasks == _data().tasks


def test_import_rejects_garbage():
    assert import_from_json("not json at all") is None
    assert import_from_json("[]") is None

    raw = json.loads(export_to_json(_data()))
    raw["fighterSkillLevels"] = {"f1": {"skill_recon": 42}}
    assert import_from_json(json.dumps(raw)) is None

    del raw["tasksV2"]
    assert import_from_json(json.dumps(raw)) is None


def test_csv_export():
    data = _data()
    data.fighters.append(Fighter(id="f2", name="Petro", full_name="Petro Bondar"))
    data.xp_ledger["f2"] = {"skill_first_aid": 12.5}

    lines = export_to_csv(data.fighters, data.xp_ledger, data.tree.categories).split("\n")
    assert lines[0] == (
        "Name,Callsign,Rank,Unit,Tactical: Reconnaissance,Tactical: Communications,Medical: First aid"
    )
    assert lines[1] == "Ivan,Hawk,,Alpha,130,0,0"
    assert lines[2] == "Petro Bondar,,,,0,0,12.5"


def test_csv_export_custom_delimiter():
    data = _data()
    out = export_to_csv(data.fighters, data.xp_ledger, data.tree.categories, delimiter=";")
    assert out.splitlines()[1] == "Ivan;Hawk;;Alpha;130;0;0"
