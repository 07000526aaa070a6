import plistlib
from pathlib import Path

import pytest

PBXPROJ_TEXT = """// !$*UTF8*$!
{
	archiveVersion = 1;
	classes = {
	};
	objectVersion = 54;
	objects = {

/* Begin PBXFileReference section */
		13B07F961A680F5B00A75B9A /* App.app */ = {isa = PBXFileReference; explicitFileType = wrapper.application; includeInIndex = 0; path = App.app; sourceTree = BUILT_PRODUCTS_DIR; };
		13B07FB61A68108700A75B9A /* Info.plist */ = {isa = PBXFileReference; fileEncoding = 4; lastKnownFileType = text.plist.xml; name = Info.plist; path = App/Info.plist; sourceTree = "<group>"; };
/* End PBXFileReference section */

/* Begin PBXGroup section */
		83CBB9F61A601CBA00E9B192 = {
			isa = PBXGroup;
			children = (
				13B07FAE1A68108700A75B9A /* App */,
			);
			indentWidth = 2;
			sourceTree = "<group>";
			tabWidth = 2;
		};
		13B07FAE1A68108700A75B9A /* App */ = {
			isa = PBXGroup;
			children = (
				13B07FB61A68108700A75B9A /* Info.plist */,
			);
			name = App;
			sourceTree = "<group>";
		};
/* End PBXGroup section */

/* Begin PBXNativeTarget section */
		13B07F861A680F5B00A75B9A /* App */ = {
			isa = PBXNativeTarget;
			buildConfigurationList = 13B07F931A680F5B00A75B9A /* Build configuration list for PBXNativeTarget "App" */;
			buildPhases = (
			);
			name = App;
			productName = App;
			productReference = 13B07F961A680F5B00A75B9A /* App.app */;
			productType = "com.apple.product-type.application";
		};
		E1A000000000000000000001 /* KlaviyoNotificationServiceExtension */ = {
			isa = PBXNativeTarget;
			buildConfigurationList = E1A000000000000000000002 /* Build configuration list for PBXNativeTarget "KlaviyoNotificationServiceExtension" */;
			buildPhases = (
			);
			name = KlaviyoNotificationServiceExtension;
			productName = KlaviyoNotificationServiceExtension;
			productType = "com.apple.product-type.app-extension";
		};
/* End PBXNativeTarget section */

/* Begin PBXProject section */
		83CBB9F71A601CBA00E9B192 /* Project object */ = {
			isa = PBXProject;
			buildConfigurationList = 83CBB9FA1A601CBA00E9B192 /* Build configuration list for PBXProject "App" */;
			compatibilityVersion = "Xcode 12.0";
			mainGroup = 83CBB9F61A601CBA00E9B192;
			projectDirPath = "";
			projectRoot = "";
			targets = (
				13B07F861A680F5B00A75B9A /* App */,
				E1A000000000000000000001 /* KlaviyoNotificationServiceExtension */,
			);
		};
/* End PBXProject section */

/* Begin XCBuildConfiguration section */
		E1A000000000000000000003 /* Debug */ = {
			isa = XCBuildConfiguration;
			buildSettings = {
				CODE_SIGN_STYLE = Manual;
				INFOPLIST_FILE = KlaviyoNotificationServiceExtension/Info.plist;
				PRODUCT_NAME = "$(TARGET_NAME)";
			};
			name = Debug;
		};
		E1A000000000000000000004 /* Release */ = {
			isa = XCBuildConfiguration;
			buildSettings = {
				INFOPLIST_FILE = KlaviyoNotificationServiceExtension/Info.plist;
				PRODUCT_NAME = "$(TARGET_NAME)";
			};
			name = Release;
		};
/* End XCBuildConfiguration section */

/* Begin XCConfigurationList section */
		E1A000000000000000000002 /* Build configuration list for PBXNativeTarget "KlaviyoNotificationServiceExtension" */ = {
			isa = XCConfigurationList;
			buildConfigurations = (
				E1A000000000000000000003 /* Debug */,
				E1A000000000000000000004 /* Release */,
			);
			defaultConfigurationIsVisible = 0;
			defaultConfigurationName = Release;
		};
/* End XCConfigurationList section */
	};
	rootObject = 83CBB9F71A601CBA00E9B192 /* Project object */;
}
"""

EXTENSION_INFO_PLIST = """<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE plist PUBLIC "-//Apple//DTD PLIST 1.0//EN" "http://www.apple.com/DTDs/PropertyList-1.0.dtd">
<plist version="1.0">
<dict>
	<key>CFBundleDisplayName</key>
	<string>KlaviyoNotificationServiceExtension</string>
	<key>CFBundleShortVersionString</key>
	<string>$(MARKETING_VERSION)</string>
	<key>CFBundleVersion</key>
	<string>$(CURRENT_PROJECT_VERSION)</string>
</dict>
</plist>
"""

ANDROID_MANIFEST = """<manifest xmlns:android="http://schemas.android.com/apk/res/android">
  <application android:name=".MainApplication" android:label="@string/app_name">
    <activity android:name=".MainActivity" android:exported="true"/>
  </application>
</manifest>
"""

JAVA_ACTIVITY = """package com.test.app;

import com.facebook.react.ReactActivity;

public class MainActivity extends ReactActivity {
  @Override
  protected String getMainComponentName() {
    return "main";
  }
}
"""

KOTLIN_ACTIVITY = """package com.test.app

import com.facebook.react.ReactActivity

class MainActivity : ReactActivity() {
    override fun getMainComponentName(): String = "main"
}
"""


@pytest.fixture
def pbxproj_text() -> str:
    return PBXPROJ_TEXT


@pytest.fixture
def android_project(tmp_path: Path) -> Path:
    """生成一个最小的 `android/` 平台目录，返回应用工程根目录。"""
    main = tmp_path / "android" / "app" / "src" / "main"
    activity_dir = main / "java" / "com" / "test" / "app"
    activity_dir.mkdir(parents=True)
    (main / "AndroidManifest.xml").write_text(ANDROID_MANIFEST, encoding="utf-8")
    (activity_dir / "MainActivity.java").write_text(JAVA_ACTIVITY, encoding="utf-8")
    return tmp_path


@pytest.fixture
def ios_project(tmp_path: Path) -> Path:
    """生成一个最小的 `ios/` 平台目录（工程名 App），返回平台目录。"""
    ios = tmp_path / "ios"
    (ios / "App").mkdir(parents=True)
    (ios / "App.xcodeproj").mkdir()
    (ios / "KlaviyoNotificationServiceExtension").mkdir()
    (ios / "App" / "Info.plist").write_bytes(
        plistlib.dumps({"CFBundleIdentifier": "com.test.app", "CFBundleName": "App"})
    )
    (ios / "KlaviyoNotificationServiceExtension" / "Info.plist").write_text(
        EXTENSION_INFO_PLIST, encoding="utf-8"
    )
    (ios / "App.xcodeproj" / "project.pbxproj").write_text(PBXPROJ_TEXT, encoding="utf-8")
    return ios
