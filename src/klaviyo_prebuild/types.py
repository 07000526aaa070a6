"""
配置记录与流程间共享的轻量类型定义。
"""

from dataclasses import dataclass

PLUGIN_NAME = "klaviyo-expo"
PLUGIN_VERSION = "0.1.0"

# 通知扩展 target 名称，同时参与共享分组标识的推导。
NSE_TARGET_NAME = "KlaviyoNotificationServiceExtension"


@dataclass(frozen=True)
class AndroidProps:
    """合并默认值后的 Android 配置。"""

    # 0 表示关闭日志，1-6 依次为 Verbose/Debug/Info/Warning/Error/Assert。
    log_level: int = 1
    open_tracking: bool = True
    notification_icon_file_path: str | None = None
    notification_color: str | None = None


@dataclass(frozen=True)
class IosProps:
    """合并默认值后的 iOS 配置。"""

    badge_autoclearing: bool = True
    code_signing_style: str = "Automatic"
    project_version: str = "1"
    marketing_version: str = "1.0"
    dev_team: str | None = None
    swift_version: str | None = None


@dataclass(frozen=True)
class MainActivityInfo:
    """主 Activity 源文件描述：路径与方言（Kotlin 或 Java）。"""

    path: str
    is_kotlin: bool
