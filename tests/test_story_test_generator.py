"""Tests for prompt building, code extraction and import merging."""

from unittest.mock import AsyncMock, patch

import pytest

from agents.story_test_agent.models import ClassInfo, InterfaceInfo, PropertyInfo, TestFramework
from agents.story_test_agent.test_generator import (
    build_prompts,
    dedupe_imports,
    derive_file_name,
    generate_test,
    render_interface,
)
from utils.exceptions import GenerationError

CART_ITEM = InterfaceInfo(
    name="CartItemProps",
    file_path="/ws/src/cart.ts",
    properties=[PropertyInfo(name="id", type="string"), PropertyInfo(name="quantity", type="number")],
    is_named_export=True,
)
CART_SERVICE = ClassInfo(name="CartService", file_path="/ws/src/cart.ts", methods=["addItem", "clear"])
CART_IMPORT = 'import { CartItemProps } from "../src/cart";'

MODEL_RESPONSE = """Here is your test:

```typescript
import { describe, it, expect } from "vitest";
import { CartItemProps }   from "../src/cart";

describe("cart", () => {
  it("adds an item", () => {
    const item: CartItemProps = { id: "1", quantity: 2 };
    expect(item.quantity).toBe(2);
  });
});
```
"""


class TestRendering:

    def test_interface_block_notes_export_status(self):
        block = render_interface(CART_ITEM)
        assert block.startswith("// exported\n// From: /ws/src/cart.ts\ninterface CartItemProps {")
        assert "  id: string;" in block
        assert "  quantity: number;" in block

    def test_unexported_interface_is_flagged(self):
        hidden = InterfaceInfo(name="Hidden", file_path="/ws/src/h.ts")
        assert render_interface(hidden).startswith("// not exported in source; do NOT import")

    def test_prompts_embed_story_context_imports_and_guidance(self):
        system, user = build_prompts(
            "Add items to the cart",
            [CART_ITEM],
            [CART_SERVICE],
            TestFramework.VITEST,
            CART_IMPORT,
            extra_instructions="Keep tests short",
        )
        assert "Use the vitest test style (describe/it" in system
        assert '"Add items to the cart"' in user
        assert "interface CartItemProps {" in user
        assert "## Relevant Classes" in user
        assert "// Methods: addItem, clear" in user
        assert f"Use these imports:\n{CART_IMPORT}" in user
        assert 'Framework imports (add if missing):\nimport { describe, it, expect, vi } from "vitest";' in user
        assert "- Additional guidance: Keep tests short" in user

    def test_unknown_framework_has_no_framework_imports(self):
        _, user = build_prompts("story", [], [], TestFramework.UNKNOWN, "")
        assert "Framework imports" not in user
        assert "Use these imports" not in user
        assert "## Relevant Classes" not in user


class TestDedupeImports:

    def test_normalized_duplicates_are_dropped_and_imports_hoisted(self):
        code = "\n".join([
            'import { describe, it } from "vitest";',
            'import {  CartItem } from "../src/cart";',
            "const a = 1;",
            'import { describe, it, expect, vi } from "vitest";',
            'import { CartItem } from "../src/cart";',
        ])
        assert dedupe_imports(code) == "\n".join([
            'import { describe, it } from "vitest";',
            'import {  CartItem } from "../src/cart";',
            "",
            "const a = 1;",
        ])

    def test_multi_line_imports_move_as_whole_statements(self):
        code = "\n".join([
            'import { a } from "x";',
            "",
            "import {",
            "  b,",
            '} from "y";',
            "import {",
            "  c,",
            '} from "z";',
            "const t = 1;",
        ])
        assert dedupe_imports(code) == "\n".join([
            'import { a } from "x";',
            "import {",
            "  b,",
            '} from "y";',
            "import {",
            "  c,",
            '} from "z";',
            "",
            "",
            "const t = 1;",
        ])

    def test_multi_line_duplicate_of_single_line_import_is_dropped(self):
        code = "\n".join([
            'import { CartItem } from "../src/cart";',
            "import {",
            "  CartItem",
            '} from "../src/cart";',
            "import '@testing-library/jest-dom'",
            "it('works', () => {});",
        ])
        assert dedupe_imports(code) == "\n".join([
            'import { CartItem } from "../src/cart";',
            "import '@testing-library/jest-dom'",
            "",
            "it('works', () => {});",
        ])

    def test_one_import_per_framework_module(self):
        code = "\n".join([
            'import { test, expect } from "@playwright/test";',
            "import { expect as e } from '@playwright/test';",
            'import { render } from "@testing-library/react";',
            'import { screen } from "@testing-library/react";',
        ])
        lines = dedupe_imports(code).split("\n")
        assert sum("@playwright/test" in line for line in lines) == 1
        assert sum("@testing-library/react" in line for line in lines) == 2


class TestDeriveFileName:

    def test_first_interface_with_suffixes_stripped(self):
        assert derive_file_name([CART_ITEM], [CART_SERVICE]) == "CartItem.test.tsx"

    def test_first_class_when_no_interface(self):
        assert derive_file_name([], [CART_SERVICE]) == "CartService.test.tsx"

    def test_generated_when_nothing_matched(self):
        assert derive_file_name([], []) == "generated.test.tsx"


class TestGenerateTest:

    @pytest.mark.asyncio
    async def test_generates_artifact_with_merged_imports(self):
        with patch(
            "agents.story_test_agent.test_generator.call_chat_completion_async",
            new=AsyncMock(return_value=MODEL_RESPONSE),
        ) as mock_llm:
            artifact = await generate_test(
                "sk-test",
                "Add items to the cart",
                [CART_ITEM],
                [],
                "/ws/__tests__",
                TestFramework.VITEST,
                [CART_IMPORT, CART_IMPORT],
            )

        assert artifact.file_name == "CartItem.test.tsx"
        lines = artifact.code.split("\n")
        assert lines[0] == 'import { describe, it, expect, vi } from "vitest";'
        assert lines[1] == CART_IMPORT
        assert lines[2] == ""
        assert sum("from \"vitest\"" in line for line in lines) == 1
        assert sum("../src/cart" in line for line in lines) == 1
        assert 'describe("cart", () => {' in artifact.code
        assert "```" not in artifact.code

        args, kwargs = mock_llm.call_args
        assert args[0] == "sk-test"
        assert kwargs["task_name"] == "story_test_generation"
        assert kwargs["model"] == "gpt-4-turbo"
        assert args[2].count(CART_IMPORT) == 1

    @pytest.mark.asyncio
    async def test_unfenced_response_is_used_verbatim(self):
        raw = 'test("works", () => {\n  expect(1).toBe(1);\n});'
        with patch(
            "agents.story_test_agent.test_generator.call_chat_completion_async",
            new=AsyncMock(return_value=raw),
        ):
            artifact = await generate_test("k", "story", [], [], "/ws/__tests__", TestFramework.UNKNOWN, [])

        assert artifact.code == raw
        assert artifact.file_name == "generated.test.tsx"

    @pytest.mark.asyncio
    async def test_completion_failures_propagate(self):
        with patch(
            "agents.story_test_agent.test_generator.call_chat_completion_async",
            new=AsyncMock(side_effect=GenerationError("service down")),
        ):
            with pytest.raises(GenerationError, match="service down"):
                await generate_test("k", "story", [], [], "/ws/__tests__", TestFramework.JEST, [])
