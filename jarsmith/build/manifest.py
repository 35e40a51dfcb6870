"""
Manifest 构建器

负责生成写在归档最前面的 META-INF/MANIFEST.MF，以及从已有归档中读回它。

序列化格式与 JAR 规范一致：
    Name: value<CRLF>
每行最多 72 字节，超出部分以单个空格开头的续行写出；
主属性段以空行结束，之后是可选的命名段（Name: <entry>）。
"""

import functools
import re
import subprocess
import zipfile
import zlib
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from .. import __version__
from ..errors import ArchiveReadError, ConfigurationError, InvalidAttributeName
from ..utils.logging import debug, LogStage

MANIFEST_NAME = "META-INF/MANIFEST.MF"
MANIFEST_VERSION = "Manifest-Version"
CREATED_BY = "Created-By"
BUILD_JDK_SPEC = "Build-Jdk-Spec"
MAIN_CLASS = "Main-Class"

GENERATOR = f"jarsmith {__version__}"
MAX_LINE_BYTES = 72

_ATTRIBUTE_NAME = re.compile(r'[A-Za-z0-9_-]{1,70}')
_JAVAC_VERSION = re.compile(r'(\d+)(?:\.(\d+))?')


class Attributes(Mapping[str, str]):
    """只读属性表

    属性名大小写不敏感，但保留首次出现时的写法；重复出现时以最后一次的值为准。
    """

    def __init__(self, pairs: Iterable[Tuple[str, str]] = ()):
        self._items: Dict[str, Tuple[str, str]] = {}
        for name, value in pairs:
            key = name.lower()
            original = self._items[key][0] if key in self._items else name
            self._items[key] = (original, value)

    def __getitem__(self, name: str) -> str:
        return self._items[name.lower()][1]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._items

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"Attributes({dict(self.items())!r})"


class Manifest:
    """Manifest 描述符：主属性段 + 命名段"""

    def __init__(self, main_attributes: Attributes, entries: Optional[Mapping[str, Attributes]] = None):
        self.main_attributes = main_attributes
        self.entries: Dict[str, Attributes] = dict(entries or {})

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Manifest):
            return NotImplemented
        return (dict(self.main_attributes.items()) == dict(other.main_attributes.items())
                and {k: dict(v.items()) for k, v in self.entries.items()}
                == {k: dict(v.items()) for k, v in other.entries.items()})

    def __repr__(self) -> str:
        return f"Manifest({dict(self.main_attributes.items())!r}, entries={len(self.entries)})"

    @property
    def main_class(self) -> Optional[str]:
        return self.main_attributes.get(MAIN_CLASS)

    def to_bytes(self) -> bytes:
        """序列化为 MANIFEST.MF 内容"""
        lines: List[bytes] = []

        # Manifest-Version 必须是第一行
        main = list(self.main_attributes.items())
        main.sort(key=lambda item: item[0].lower() != MANIFEST_VERSION.lower())
        for name, value in main:
            lines.extend(_wrap_line(f"{name}: {value}"))
        lines.append(b"")

        for entry_name, attributes in self.entries.items():
            lines.extend(_wrap_line(f"Name: {entry_name}"))
            for name, value in attributes.items():
                lines.extend(_wrap_line(f"{name}: {value}"))
            lines.append(b"")

        return b"".join(line + b"\r\n" for line in lines)

    @classmethod
    def parse(cls, data: bytes) -> 'Manifest':
        """解析 MANIFEST.MF 内容

        Raises:
            ArchiveReadError: 内容不是合法的 manifest
        """
        try:
            text = data.decode('utf-8')
        except UnicodeDecodeError as e:
            raise ArchiveReadError(f"Manifest 不是合法的 UTF-8: {e}") from e

        sections = _split_sections(text)
        if not sections:
            return cls(Attributes())

        main = Attributes(_parse_header(line) for line in sections[0])
        entries: Dict[str, Attributes] = {}
        for section in sections[1:]:
            name, value = _parse_header(section[0])
            if name.lower() != "name":
                raise ArchiveReadError(f"Manifest 命名段必须以 Name 开头: {section[0]!r}")
            entries[value] = Attributes(_parse_header(line) for line in section[1:])

        return cls(main, entries)


def _wrap_line(line: str) -> List[bytes]:
    """按 72 字节折行，不拆分多字节字符"""
    result: List[bytes] = []
    current = b""
    limit = MAX_LINE_BYTES
    for ch in line:
        encoded = ch.encode('utf-8')
        if len(current) + len(encoded) > limit:
            result.append(current)
            current = b" "
            limit = MAX_LINE_BYTES
        current += encoded
    result.append(current)
    return result


def _split_sections(text: str) -> List[List[str]]:
    """拆分为段，每段是已合并续行的逻辑行列表"""
    sections: List[List[str]] = []
    current: List[str] = []
    for raw in re.split(r'\r\n|\r|\n', text):
        if raw == "":
            if current:
                sections.append(current)
                current = []
            continue
        if raw.startswith(" "):
            if not current:
                raise ArchiveReadError(f"Manifest 续行没有对应的属性: {raw!r}")
            current[-1] += raw[1:]
        else:
            current.append(raw)
    if current:
        sections.append(current)
    return sections


def _parse_header(line: str) -> Tuple[str, str]:
    name, sep, value = line.partition(": ")
    if not sep or not _ATTRIBUTE_NAME.fullmatch(name):
        raise ArchiveReadError(f"Manifest 属性格式错误: {line!r}")
    return name, value


@functools.lru_cache(maxsize=1)
def detect_jdk_spec() -> Optional[str]:
    """通过 `javac -version` 探测 JDK 规范版本（如 "17"、"1.8"），探测不到返回 None"""
    try:
        result = subprocess.run(
            ["javac", "-version"],
            capture_output=True,
            text=True,
            timeout=30,
        )
    except (OSError, subprocess.SubprocessError) as e:
        debug(f"无法探测 JDK 版本: {e}", stage=LogStage.JAR)
        return None

    match = _JAVAC_VERSION.search(result.stdout + result.stderr)
    if result.returncode != 0 or not match:
        return None
    major, minor = match.group(1), match.group(2)
    # 9 之前的版本号形如 1.8.0_292
    if major == "1" and minor:
        return f"1.{minor}"
    return major


class ManifestBuilder:
    """Manifest 构建器"""

    def __init__(self, generator: str = GENERATOR, jdk_spec: Optional[str] = None):
        """初始化 Manifest 构建器

        Args:
            generator: 写入 Created-By 的生成器标识
            jdk_spec: 写入 Build-Jdk-Spec 的版本，None 时自动探测
        """
        self.generator = generator
        self.jdk_spec = jdk_spec

    @staticmethod
    def validate_name(name: str) -> str:
        """校验属性名

        Raises:
            InvalidAttributeName: 名称为空、过长或含有 ':'、换行、空格等字符
        """
        if not isinstance(name, str) or not _ATTRIBUTE_NAME.fullmatch(name):
            raise InvalidAttributeName(name)
        return name

    def default_attributes(self, main_class: Optional[str] = None) -> Dict[str, str]:
        """核心属性，配置了入口类时附带 Main-Class"""
        attrs = {
            MANIFEST_VERSION: "1.0",
            CREATED_BY: self.generator,
            BUILD_JDK_SPEC: self.jdk_spec or detect_jdk_spec() or "unknown",
        }
        if main_class:
            attrs[MAIN_CLASS] = str(main_class)
        return attrs

    def build(self, attrs: Mapping[str, str]) -> Manifest:
        """由属性表构建 Manifest

        所有名称都会先校验，任何一个不合法都不会产生结果。

        Raises:
            InvalidAttributeName: 属性名不合法
            ConfigurationError: 属性值含有换行
        """
        for name in attrs:
            self.validate_name(name)

        pairs = []
        for name, value in attrs.items():
            value = str(value)
            if any(ch in value for ch in '\r\n\0'):
                raise ConfigurationError(f"Manifest 属性 {name} 的值不能包含换行: {value!r}")
            pairs.append((name, value))

        return Manifest(Attributes(pairs))

    def build_default(self, main_class: Optional[str] = None, extra: Optional[Mapping[str, str]] = None) -> Manifest:
        """构建核心属性 + 额外属性的 Manifest"""
        attrs = self.default_attributes(main_class)
        if extra:
            attrs.update(extra)
        return self.build(attrs)


def read_manifest(archive_path: Union[str, Path]) -> Optional[Manifest]:
    """读取归档中的 META-INF/MANIFEST.MF，没有时返回 None

    Raises:
        FileNotFoundError: 归档不存在
        ArchiveReadError: 归档或 manifest 格式错误
    """
    archive_path = Path(archive_path)
    if not archive_path.is_file():
        raise FileNotFoundError(f"归档不存在: {archive_path}")

    try:
        with zipfile.ZipFile(archive_path, 'r') as zf:
            for info in zf.infolist():
                if info.filename.upper() == MANIFEST_NAME:
                    return Manifest.parse(zf.read(info))
    except (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError, RuntimeError) as e:
        raise ArchiveReadError(f"无法读取归档 {archive_path}: {e}") from e

    return None
