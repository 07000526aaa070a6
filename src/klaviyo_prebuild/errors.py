"""
预构建流程的异常类型。

所有致命错误都继承自 `PrebuildError`，由 CLI 统一转换为 `SystemExit`。
"""


class PrebuildError(RuntimeError):
    """预构建流程中无法继续的错误基类。"""


class ConfigError(PrebuildError):
    """插件配置非法或缺失必填字段。"""


class MainActivityNotFoundError(PrebuildError):
    """无法定位 Android 主 Activity 源文件。"""


class PackageDeclarationNotFoundError(PrebuildError):
    """主 Activity 源文件缺少 `package` 声明。"""


class ClassDeclarationNotFoundError(PrebuildError):
    """主 Activity 源文件缺少 `MainActivity` 类声明。"""


class ExtensionPlistError(PrebuildError):
    """通知扩展的 `Info.plist` 不存在或无法读取。"""
