"""
防具描述

防具属性来自外部目录的标签集合，通过前缀/成员查找推导，
缺失或格式错误的标签回退到默认值（无属性、中装）。
"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple

ELEMENT_TAG_PREFIX = "element_"
ARMOR_TYPE_TAG_PREFIX = "armor_type_"
MAGIC_RESIST_TAG = "magic_resist"


class ArmorClass(str, Enum):
    """防具类型"""

    LIGHT = "light"  # 轻装（布、服）
    MEDIUM = "medium"  # 中装（皮革、轻金属）
    HEAVY = "heavy"  # 重装（铁、岩）


@dataclass(frozen=True)
class ArmorDescriptor:
    """防具标签集合"""

    tags: Tuple[str, ...] = ()

    @classmethod
    def from_tags(cls, tags: Optional[Iterable]) -> "ArmorDescriptor":
        if not tags or isinstance(tags, (str, bytes)):
            return cls()
        try:
            return cls(tags=tuple(tag for tag in tags if isinstance(tag, str)))
        except TypeError:
            return cls()

    @property
    def element(self):
        """第一个 element_<id> 标签对应的属性"""
        from .symbol import Element

        for tag in self.tags:
            if tag.startswith(ELEMENT_TAG_PREFIX):
                return Element.parse(tag[len(ELEMENT_TAG_PREFIX):])
        return Element.NONE

    @property
    def armor_class(self) -> ArmorClass:
        """防具类型（按 light -> medium -> heavy 的顺序匹配），默认中装"""
        for armor_class in ArmorClass:
            if f"{ARMOR_TYPE_TAG_PREFIX}{armor_class.value}" in self.tags:
                return armor_class
        return ArmorClass.MEDIUM

    @property
    def magic_resist(self) -> bool:
        return MAGIC_RESIST_TAG in self.tags
