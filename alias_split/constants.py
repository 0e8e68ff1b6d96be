"""
Built-in tables for alias-split.

Word lists used by the cost guard, the coverage guard and the natural
alias builder. Every list here can be overridden through AliasConfig;
these are only the defaults.
"""

from typing import Dict, FrozenSet


# ============================================================================
# Cost Guard Vocabulary
# ============================================================================

DEFAULT_STOPWORDS: FrozenSet[str] = frozenset([
    'the', 'a', 'an', 'of', 'for', 'to', 'in', 'on', 'at', 'by',
    'and', 'or', 'but', 'with', 'from',
])

# Technology brand names that stay in the source language
DEFAULT_KEEP_ENGLISH: FrozenSet[str] = frozenset([
    'react', 'vue', 'redux', 'tailwind', 'jest', 'vitest',
    'webpack', 'vite', 'eslint', 'prettier', 'nodejs', 'typescript',
])

DEFAULT_ACRONYM_ALLOWLIST: FrozenSet[str] = frozenset([
    'UI', 'API', 'HTTP', 'HTTPS', 'URL', 'URI', 'ID', 'UUID',
    'CSS', 'HTML', 'JS', 'TS', 'JSX', 'TSX', 'JSON', 'XML',
    'CSV', 'PDF', 'PNG', 'JPG', 'GIF', 'SVG', 'DOM', 'SDK',
    'CLI', 'JWT', 'CPU', 'GPU', 'DB', 'SQL', 'ORM',
    'TCP', 'UDP', 'TLS', 'SSL', 'CI', 'CD', 'MD', 'IOS', 'OS',
])

LANGUAGE_CODES: FrozenSet[str] = frozenset([
    'en', 'zh', 'ja', 'fr', 'de', 'es', 'pt', 'ru', 'ko',
    'it', 'nl', 'pl', 'tr', 'ar', 'he', 'th', 'vi', 'id',
])

BUILD_TAGS: FrozenSet[str] = frozenset([
    'min', 'map', 'bundle', 'chunk', 'vendor', 'dist', 'build',
])

HASH_ALGORITHMS: FrozenSet[str] = frozenset([
    'sha', 'md5', 'sha1', 'sha256', 'sha512', 'uuid', 'guid',
])

# Entry points and placeholders that carry no translatable meaning
PLACEHOLDER_WORDS: FrozenSet[str] = frozenset([
    'index', 'main', 'default', 'app', 'home', 'root', 'core', 'base',
    'common', 'util', 'utils', 'helper', 'helpers', 'lib', 'libs', 'src',
    'test', 'tests', 'spec', 'specs', 'demo', 'example', 'examples',
])

# A numeral next to one of these words is an ordinal, not an ID
SEMANTIC_NUMBER_WORDS: FrozenSet[str] = frozenset([
    'chapter', 'section', 'level', 'part', 'volume', 'lesson',
    'episode', 'stage', 'phase', 'step', 'round',
])

SEMANTIC_YEAR_RANGE = (1900, 2100)
SEMANTIC_ORDINAL_RANGE = (1, 10)


# ============================================================================
# Extension Suffixes
# ============================================================================

# Literal style: appended with the joiner when literal_extension_mode="suffix"
LITERAL_EXT_SUFFIXES: Dict[str, str] = {
    'tsx': '组件', 'jsx': '组件', 'vue': '组件', 'svelte': '组件',
    'ts': '模块', 'js': '模块', 'mjs': '模块', 'cjs': '脚本',
    'py': '脚本', 'sh': '脚本', 'bash': '脚本',
    'json': '配置', 'yaml': '配置', 'yml': '配置', 'toml': '配置', 'ini': '配置',
    'md': '文档', 'rst': '文档', 'txt': '文本',
    'css': '样式', 'scss': '样式', 'less': '样式', 'sass': '样式',
}

NATURAL_EXT_SUFFIXES: Dict[str, str] = {
    'tsx': '组件', 'jsx': '组件', 'vue': '组件',
    'ts': '模块', 'js': '脚本', 'mjs': '脚本', 'cjs': '脚本', 'py': '脚本',
    'css': '样式', 'scss': '样式', 'sass': '样式', 'less': '样式',
    'md': '文档', 'markdown': '文档', 'txt': '文本',
    'json': '配置', 'yaml': '配置', 'yml': '配置', 'toml': '配置', 'ini': '配置',
    'spec': '测试', 'test': '测试',
}


# ============================================================================
# Natural Builder Categories
# ============================================================================

# Resolved words listed here are modifiers; every other resolved word is a noun
MODIFIER_WORDS: FrozenSet[str] = frozenset([
    # scope
    'universal', 'global', 'local', 'common', 'shared', 'public', 'private',
    # level
    'simple', 'basic', 'advanced', 'pro', 'lite', 'mini', 'full',
    # testing
    'test', 'spec', 'mock', 'demo', 'example', 'sample',
    # state
    'active', 'disabled', 'enabled', 'loading',
    # misc
    'main', 'sub', 'new', 'old', 'current', 'default', 'custom',
])

# Modifiers moved into the parenthesised variant suffix
VARIANT_WORDS: FrozenSet[str] = frozenset([
    'simple', 'lite', 'mini', 'basic', 'advanced', 'pro',
    'test', 'spec', 'mock', 'demo', 'example', 'sample',
])

# Head noun priority, highest first
UI_HEAD_NOUNS = (
    'section', 'block', 'panel', 'card', 'page', 'view', 'component',
)

PRIORITY_HEAD_ACRONYMS = ('api',)

ACTION_HEAD_NOUNS: FrozenSet[str] = frozenset([
    'analysis', 'analyze', 'analyzer',
    'processor', 'handler', 'parser', 'renderer', 'formatter', 'validator',
    'manager', 'controller', 'service', 'provider',
    'builder', 'factory', 'generator', 'creator',
])


# ============================================================================
# Output Limits
# ============================================================================

ILLEGAL_PATH_CHARS = '\\/:*?"<>|'
ILLEGAL_CHAR_REPLACEMENT = '·'

MAX_LITERAL_LENGTH = 120
MAX_NATURAL_LENGTH = 32
MAX_NAME_LENGTH = 255
