import logging
import sys

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.INFO)
    formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] [StoryTestAgent] %(message)s',
        datefmt='%I:%M:%S %p'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False

MAX_ATTEMPTS = 3
DEFAULT_MODEL = "gpt-4-turbo"
GENERATION_TASK = "story_test_generation"
TEST_DIR_NAME = "__tests__"
TEST_FILE_SUFFIX = ".test.tsx"
DEFAULT_FILE_BASENAME = "generated"
TEMP_FILE_PREFIX = "storytotest-attempt"

TRIGGER_ACTION = "labeled"
TRIGGER_LABEL = "ready-for-tests"
BRANCH_PREFIX = "test/issue-"
PRIMARY_BASE_BRANCH = "main"
FALLBACK_BASE_BRANCH = "master"

TEST_TIMEOUT_SECONDS = 180
OUTPUT_BUFFER_LIMIT = 1024 * 1024
UNSUPPORTED_FRAMEWORK_MESSAGE = "Unsupported or unknown test framework."

ACTION_VERBS = {
    "add", "remove", "delete", "create", "update",
    "view", "edit", "search", "filter",
}

# Filler words that are never domain entities, even when longer than 3 chars.
STOPWORDS = {
    "with", "that", "this", "from", "into", "onto",
    "have", "been", "being", "will", "would", "should", "could",
    "cannot", "must", "want", "wants", "need", "needs", "able",
    "user", "users", "when", "then", "given", "where", "which", "while",
    "there", "their", "them", "they", "these", "those", "what", "about",
    "also", "only", "some", "such", "each", "every", "more", "most", "other",
    "than", "very", "just", "like", "your", "mine", "ours",
}

FRAMEWORK_IMPORTS = {
    "vitest": 'import { describe, it, expect, vi } from "vitest";',
    "jest": 'import { describe, it, expect, jest } from "@jest/globals";',
    "playwright": 'import { test, expect } from "@playwright/test";',
}

FRAMEWORK_STYLE_HINTS = {
    "vitest": " (describe/it or test.describe when grouping; vi for mocks)",
    "playwright": " (use test() with fixtures; expect from @playwright/test)",
}

FRAMEWORK_MODULES = {"vitest", "@jest/globals", "@playwright/test"}

JEST_CONFIG_FILES = ["jest.config.js", "jest.config.ts", "jest.config.cjs", "jest.config.mjs"]
VITEST_CONFIG_FILES = ["vitest.config.ts", "vitest.config.js", "vite.config.ts", "vite.config.js"]
PLAYWRIGHT_CONFIG_FILES = [
    "playwright.config.ts", "playwright.config.js",
    "playwright.config.mjs", "playwright.config.cjs",
]

SOURCE_DIRS = ["src", "app", "lib", "components"]
SOURCE_EXTENSIONS = {'.ts', '.tsx'}
IGNORE_DIRS = {
    '.git', 'node_modules', '.next', 'dist', 'build', 'coverage',
    '.cache', '.nuxt', '.output', TEST_DIR_NAME,
}
IMPORT_STRIP_EXTENSIONS = ('.tsx', '.ts', '.jsx', '.js')
