import re

import pytest

from klaviyo_prebuild import pbxproj
from klaviyo_prebuild.fileops import FileOps


def test_loads_parses_objects_and_strips_comments(pbxproj_text) -> None:
    data = pbxproj.loads(pbxproj_text)
    assert data["archiveVersion"] == "1"
    assert data["classes"] == {}
    assert data["rootObject"] == "83CBB9F71A601CBA00E9B192"

    objects = data["objects"]
    target = objects["13B07F861A680F5B00A75B9A"]
    assert target["productType"] == "com.apple.product-type.application"
    assert target["buildPhases"] == []
    assert objects["83CBB9F61A601CBA00E9B192"]["children"] == ["13B07FAE1A68108700A75B9A"]
    assert objects["13B07FB61A68108700A75B9A"]["sourceTree"] == "<group>"


def test_dumps_output_parses_back_to_same_data(pbxproj_text) -> None:
    data = pbxproj.loads(pbxproj_text)
    text = pbxproj.dumps(data)
    assert text.startswith("// !$*UTF8*$!\n{\n")
    assert pbxproj.loads(text) == data
    assert pbxproj.dumps(pbxproj.loads(text)) == text


def test_dumps_groups_objects_by_isa(pbxproj_text) -> None:
    text = pbxproj.dumps(pbxproj.loads(pbxproj_text))
    sections = re.findall(r"/\* Begin (\w+) section \*/", text)
    assert sections == sorted(sections)
    assert (
        "\t\t13B07F961A680F5B00A75B9A = {isa = PBXFileReference; explicitFileType = wrapper.application; "
        "includeInIndex = 0; path = App.app; sourceTree = BUILT_PRODUCTS_DIR; };"
    ) in text
    assert 'PRODUCT_NAME = "$(TARGET_NAME)";' in text
    assert 'projectDirPath = "";' in text


def test_quoted_strings_handle_escapes() -> None:
    data = pbxproj.loads('{ a = "say \\"hi\\"\\n"; b = \'x\'; }')
    assert data == {"a": 'say "hi"\n', "b": "x"}
    assert pbxproj.loads(pbxproj.dumps(data)) == data


@pytest.mark.parametrize(
    "text",
    [
        "{ a = 1; ",
        '{ a = "open; }',
        "{ a = (1, 2; }",
        "{ a = 1; } trailing",
        "( 1, 2 )",
        "{ /* never closed",
    ],
)
def test_loads_rejects_malformed_input(text) -> None:
    with pytest.raises(ValueError, match="pbxproj parse error at line 1"):
        pbxproj.loads(text)


def test_generate_id_is_stable() -> None:
    a = pbxproj.generate_id("PBXFileReference:GROUP:file.plist")
    assert a == pbxproj.generate_id("PBXFileReference:GROUP:file.plist")
    assert re.fullmatch(r"[0-9A-F]{24}", a)
    assert a != pbxproj.generate_id("PBXFileReference:GROUP:other.plist")


def test_load_and_save_go_through_fileops(tmp_path, pbxproj_text) -> None:
    path = str(tmp_path / "project.pbxproj")
    fs = FileOps()
    fs.write_text(path, pbxproj_text)
    data = pbxproj.load(fs, path)
    data["objects"]["13B07FAE1A68108700A75B9A"]["name"] = "Renamed"
    pbxproj.save(fs, path, data)
    assert pbxproj.load(fs, path)["objects"]["13B07FAE1A68108700A75B9A"]["name"] == "Renamed"
