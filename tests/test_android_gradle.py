from klaviyo_prebuild.android_gradle import (
    GRADLE_PROPERTIES,
    gradle_properties_path,
    patch_gradle_properties,
    patch_gradle_properties_text,
    upsert_property,
)
from klaviyo_prebuild.fileops import FileOps


def test_upsert_property_appends_missing_key() -> None:
    assert upsert_property("android.useAndroidX=true", "a.b", "c") == "android.useAndroidX=true\na.b=c\n"
    assert upsert_property("", "a.b", "c") == "a.b=c\n"


def test_upsert_property_rewrites_in_place_and_drops_duplicates() -> None:
    text = "# jvm args\norg.gradle.jvmargs=-Xmx512m\nfoo=bar\norg.gradle.jvmargs = -Xmx1g\nbaz=1\n"
    out = upsert_property(text, "org.gradle.jvmargs", "-Xmx2048m")
    assert out == "# jvm args\norg.gradle.jvmargs=-Xmx2048m\nfoo=bar\nbaz=1\n"


def test_upsert_property_ignores_comments_and_similar_keys() -> None:
    text = "#org.gradle.jvmargs=-Xmx512m\norg.gradle.jvmargs.extra=1\n"
    out = upsert_property(text, "org.gradle.jvmargs", "-Xmx2048m")
    assert out == text + "org.gradle.jvmargs=-Xmx2048m\n"


def test_patch_text_keeps_crlf_and_is_idempotent() -> None:
    text = "android.useAndroidX=true\r\nkotlin.jvm.target.validation.mode=error\r\n"
    out = patch_gradle_properties_text(text)
    assert out == (
        "android.useAndroidX=true\r\n"
        "kotlin.jvm.target.validation.mode=warning\r\n"
        "org.gradle.jvmargs=-Xmx2048m -Dfile.encoding=UTF-8\r\n"
    )
    assert patch_gradle_properties_text(out) == out


def test_patch_gradle_properties_creates_file(tmp_path) -> None:
    fs = FileOps()
    assert patch_gradle_properties(fs, str(tmp_path)) is True
    content = (tmp_path / "gradle.properties").read_text(encoding="utf-8")
    assert content.splitlines() == [f"{k}={v}" for k, v in GRADLE_PROPERTIES]
    assert patch_gradle_properties(fs, str(tmp_path)) is False


def test_gradle_properties_path(tmp_path) -> None:
    assert gradle_properties_path(str(tmp_path)) == str(tmp_path / "gradle.properties")
