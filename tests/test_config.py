"""Tests for typed configuration, list codecs and properties load/save."""

import logging
import os
import stat
import sys

import pytest

from femexec.build import (
    CodecError,
    DimensionType,
    DispDof,
    FemConfig,
    FemExecutorConfig,
    FemProgram,
    FemProgramConfig,
    RenderError,
    SchemaError,
    config_to_properties,
    decode_dofs,
    decode_ints,
    encode_list,
    load_config,
    missing_fields,
    parse_enum,
    parse_properties,
    render_properties,
    save_config,
)


def _substructures():
    mdl1 = FemConfig("MDL-01", DimensionType.TwoD, FemProgram.OPENSEES, "model1.tcl", [2])
    mdl1.add_effective_dofs(2, [DispDof.DX, DispDof.RZ])
    mdl2 = FemConfig("MDL-02", DimensionType.TwoD, FemProgram.OPENSEES, "model2.tcl", [2, 3, 4])
    for node in (2, 3, 4):
        mdl2.add_effective_dofs(node, [DispDof.DX, DispDof.DY, DispDof.RZ])
    mdl3 = FemConfig("MDL-03", DimensionType.ThreeD, FemProgram.OPENSEES, "model3.tcl", [3])
    mdl3.add_effective_dofs(3, [DispDof.DX])
    return [mdl1, mdl2, mdl3]


def _config(order=(0, 1, 2)):
    subs = _substructures()
    cfg = FemExecutorConfig("/tmp/femexec runs")
    cfg.fem_program_parameters[FemProgram.OPENSEES] = FemProgramConfig(
        FemProgram.OPENSEES, "/usr/bin/OpenSees", "/home/user/static_analysis.tcl")
    for i in order:
        cfg.substruct_cfgs[subs[i].address] = subs[i]
    return cfg


class TestSchema:

    def test_parse_enum_by_name(self):
        assert parse_enum(DimensionType, "ThreeD") is DimensionType.ThreeD
        assert parse_enum(FemProgram, " ZEUS_NL ") is FemProgram.ZEUS_NL

    def test_parse_enum_rejects_unknown(self):
        with pytest.raises(SchemaError, match="allowed="):
            parse_enum(DispDof, "DW")

    def test_program_for(self):
        cfg = _config()
        assert cfg.program_for("MDL-02").executable_path == "/usr/bin/OpenSees"
        with pytest.raises(SchemaError):
            cfg.program_for("MDL-99")
        cfg.substruct_cfgs["MDL-04"] = FemConfig("MDL-04", fem_program=FemProgram.ABAQUS)
        with pytest.raises(SchemaError, match="not configured"):
            cfg.program_for("MDL-04")

    def test_missing_fields(self):
        assert missing_fields(_substructures()[1]) == []
        partial = FemConfig("MDL-05", node_sequence=[1, 2])
        partial.add_effective_dofs(1, [DispDof.DX])
        assert missing_fields(partial) == [
            "dimension", "fem.program", "model.filename", "effective.dofs.2",
        ]


class TestCodecs:

    def test_encode(self):
        assert encode_list([2, 3, 4]) == "2, 3, 4"
        assert encode_list([DispDof.DX, DispDof.RZ]) == "DX, RZ"
        assert encode_list([]) == ""

    def test_decode(self):
        assert decode_ints(" 2,3 , 4 ") == [2, 3, 4]
        assert decode_dofs("DX, RZ") == [DispDof.DX, DispDof.RZ]
        assert decode_ints("") == []

    def test_decode_rejects_bad_token(self):
        with pytest.raises(CodecError):
            decode_ints("2, x")
        with pytest.raises(CodecError):
            decode_dofs("DX, Q")
        with pytest.raises(CodecError):
            decode_ints(None)


class TestPropertiesText:

    def test_comments_continuations_and_separators(self):
        text = (
            "# header\n"
            "! other comment\n"
            "a=1\n"
            "b : two\n"
            "c three\n"
            "long = first, \\\n"
            "       second\n"
        )
        props = parse_properties(text)
        assert props == {"a": "1", "b": "two", "c": "three", "long": "first, second"}

    def test_escapes_survive_render(self):
        props = {"work.dir": "C:\\runs\\my dir", "key with space": " lead:ing=#"}
        back = parse_properties(render_properties(props))
        assert back == props

    def test_render_sorts_keys(self):
        text = render_properties({"b": "2", "a": "1"}, comment="cfg")
        lines = text.splitlines()
        assert lines[0] == "#cfg"
        assert lines[1].startswith("#")
        assert lines[2:] == ["a=1", "b=2"]


class TestLoadSave:

    def test_round_trip(self, tmp_path):
        path = str(tmp_path / "femexec.properties")
        save_config(_config(), path)
        cfg = load_config(path)
        assert cfg.work_dir == "/tmp/femexec runs"
        prog = cfg.fem_program_parameters[FemProgram.OPENSEES]
        assert prog.executable_path == "/usr/bin/OpenSees"
        assert prog.static_script_path == "/home/user/static_analysis.tcl"
        assert sorted(cfg.substruct_cfgs) == ["MDL-01", "MDL-02", "MDL-03"]
        for expected in _substructures():
            assert cfg.substruct_cfgs[expected.address] == expected

    def test_substructure_order_does_not_matter(self):
        assert config_to_properties(_config((0, 1, 2))) == config_to_properties(_config((2, 0, 1)))

    def test_saved_keys(self):
        props = config_to_properties(_config())
        assert props["substructures"] == "MDL-01, MDL-02, MDL-03"
        assert props["MDL-01.effective.dofs.2"] == "DX, RZ"
        assert props["MDL-02.control.nodes"] == "2, 3, 4"
        assert props["MDL-03.dimension"] == "ThreeD"
        assert props["OPENSEES.static.script"] == "/home/user/static_analysis.tcl"

    def test_lenient_load_logs_gaps(self, tmp_path, caplog):
        path = tmp_path / "partial.properties"
        path.write_text(
            "work.dir=/tmp/w\n"
            "substructures=MDL-01, MDL-02\n"
            "MDL-01.dimension=FourD\n"
            "MDL-01.control.nodes=2\n"
            "MDL-01.fem.program=OPENSEES\n"
            "MDL-01.model.filename=m1.tcl\n"
            "MDL-01.effective.dofs.2=DX, QQ\n"
            "MDL-02.control.nodes=3, 4\n"
            "MDL-02.effective.dofs.3=DY\n",
            encoding="utf-8",
        )
        with caplog.at_level(logging.ERROR, logger="femexec.build.config"):
            cfg = load_config(str(path))
        assert set(cfg.substruct_cfgs) == {"MDL-01", "MDL-02"}
        assert missing_fields(cfg.substruct_cfgs["MDL-01"]) == ["dimension", "effective.dofs.2"]
        mdl2 = cfg.substruct_cfgs["MDL-02"]
        assert mdl2.node_sequence == [3, 4]
        assert mdl2.get_effective_dofs(3) == [DispDof.DY]
        assert "effective.dofs.4" in missing_fields(mdl2)
        assert cfg.fem_program_parameters == {}
        messages = " ".join(r.getMessage() for r in caplog.records)
        assert "FourD" in messages
        assert "Missing Effective DOFs for node 4" in messages

    def test_unreadable_file(self, tmp_path):
        assert load_config(str(tmp_path / "missing.properties")) is None

    def test_save_into_file_path_fails(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        with pytest.raises(RenderError):
            save_config(_config(), str(blocker / "cfg.properties"))


class TestAtomicWrite:
    """Saving replaces the file in one step and leaves nothing behind."""

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permission bits")
    def test_new_file_honours_umask(self, tmp_path):
        umask = os.umask(0)
        os.umask(umask)
        path = tmp_path / "cfg.properties"
        save_config(_config(), str(path))
        assert stat.S_IMODE(path.stat().st_mode) == 0o666 & ~umask

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permission bits")
    def test_existing_mode_is_kept(self, tmp_path):
        path = tmp_path / "cfg.properties"
        path.write_text("")
        os.chmod(str(path), 0o640)
        save_config(_config(), str(path))
        assert stat.S_IMODE(path.stat().st_mode) == 0o640

    def test_failed_replace_removes_temp_file(self, tmp_path, monkeypatch):
        import femexec.build.config as config

        def refuse(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(config.os, "replace", refuse)
        with pytest.raises(RenderError, match="disk full"):
            save_config(_config(), str(tmp_path / "cfg.properties"))
        assert list(tmp_path.iterdir()) == []


def test_missing_work_dir_round_trips(tmp_path):
    cfg = _config()
    cfg.work_dir = None
    assert "work.dir" not in config_to_properties(cfg)
    path = str(tmp_path / "cfg.properties")
    save_config(cfg, path)
    assert load_config(path).work_dir is None
