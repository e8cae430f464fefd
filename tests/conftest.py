import json
from unittest.mock import MagicMock

import httpx
import pytest
import respx

from v0_mcp.client.v0_client import V0Client
from v0_mcp.config import GenerationDefaults
from v0_mcp.models.response import ComponentMetadata, ComponentResponse
from tests import TEST_API_KEY

BASE_URL = "https://api.v0.test/v1"
COMPLETIONS_URL = f"{BASE_URL}/chat/completions"

# PNG signature padded past the 100-character plausibility threshold
SAMPLE_PNG = "iVBORw0KGgo" + "A" * 120

COMPONENT_ANSWER = """Here is your component:

```tsx
import { Card, CardContent } from "@/components/ui/card"
import { Button } from "@/components/ui/button"
import { motion } from "framer-motion"

interface UserCardProps {
  name: string
  email: string
}

export default function UserCard({ name, email }: UserCardProps) {
  return (
    <Card>
      <CardContent>{name} - {email}</CardContent>
      <Button>Follow</Button>
    </Card>
  )
}
```

IMPORTS NEEDED:
- framer-motion

USAGE EXAMPLE:
```tsx
<UserCard name="Ada" email="ada@example.com" />
```

INTEGRATION GUIDELINES:
- Place the card inside a responsive grid
- Pass user data from the parent page

CUSTOMIZATION NOTES:
- Change the card padding with the className prop
"""

IMPROVEMENT_ANSWER = """```tsx
import { Button } from "@/components/ui/button"

export default function SaveButton() {
  return <Button className="transition-all duration-200">Save</Button>
}
```

CHANGES MADE:
- Added smooth transitions
- Tightened spacing

VISUAL ENHANCEMENTS:
- Hover state with subtle shadow

BREAKING CHANGES:
- Removed the legacy size prop

MIGRATION GUIDE:
1. Replace size="lg" with className="h-12"
"""

ANALYSIS_ANSWER = """1. VISUAL COMPONENT HIERARCHY:
- Name: ProductGallery
- Type: ui_component
- Visual Purpose: Shows product images with thumbnails
- Shadcn Dependencies: card, button
- Priority: high

- Name: ReviewsSection
- Type: page_component
- Visual Purpose: Lists customer reviews
- Shadcn Dependencies: card, avatar, badge

2. COMPONENT BUILD ORDER:
1. ProductGallery
2. ReviewsSection

3. VISUAL RELATIONSHIPS:
- Component: ReviewsSection
- Contained within: ProductPage
- Visually related to: ProductGallery, PriceTag
- Shared patterns: card layout, rounded corners

4. SHADCN/UI INTEGRATION:
- ProductGallery
  - Uses: card, button
  - Combines: card + button
- Consistency: use rounded-lg on every card
"""


def chat_body(content: str) -> dict:
    return {
        "choices": [{"message": {"role": "assistant", "content": content}, "finish_reason": "stop"}],
        "usage": {"prompt_tokens": 10, "completion_tokens": 20},
    }


def sse_body(*chunks: str, done: bool = True) -> bytes:
    lines = [f"data: {json.dumps({'choices': [{'delta': {'content': c}}]})}\n\n" for c in chunks]
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode()


def component_response(content: str = COMPONENT_ANSWER) -> ComponentResponse:
    return ComponentResponse(
        code="export default function UserCard() {}",
        metadata=ComponentMetadata(name="UserCard"),
        content=content,
    )


@pytest.fixture
def v0_api():
    """Mock the v0 HTTP API; routes are added per test."""
    with respx.mock(base_url=BASE_URL, assert_all_called=False) as mock:
        yield mock


@pytest.fixture
def defaults():
    return GenerationDefaults(backoff_seconds=1.0)


@pytest.fixture
def client(defaults):
    return V0Client(TEST_API_KEY, base_url=BASE_URL, defaults=defaults)


@pytest.fixture
def mock_client():
    """A V0Client double; its async methods come back as AsyncMocks."""
    return MagicMock(spec=V0Client)


@pytest.fixture
def ok_route(v0_api):
    return v0_api.post("/chat/completions").mock(return_value=httpx.Response(200, json=chat_body(COMPONENT_ANSWER)))
