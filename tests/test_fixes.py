import json

import pytest

from scanner.errors import QuotaExceeded
from scanner.fixes import FIX_MAX_OUTPUT_TOKENS, FixGenerator, placeholder_fix


ISSUE = {"title": "Missing meta description", "why": "Snippets", "fix": "Add one", "category": "On-Page SEO"}


@pytest.mark.asyncio
async def test_model_fix_merged_over_placeholder(model_client_cls):
    client = model_client_cls([json.dumps({"htmlCode": '<meta name="description" content="...">'})])

    fix = await FixGenerator(client).generate(ISSUE, {"url": "https://example.com/"})

    assert fix["htmlCode"] == '<meta name="description" content="...">'
    assert fix["cssCode"] == placeholder_fix(ISSUE)["cssCode"]
    assert "implementation" in fix
    assert "https://example.com/" in client.prompts[0]
    assert client.options[0]["max_output_tokens"] == FIX_MAX_OUTPUT_TOKENS


@pytest.mark.asyncio
async def test_quota_error_propagates(model_client_cls):
    client = model_client_cls([Exception("quota exceeded for this project")])
    with pytest.raises(QuotaExceeded):
        await FixGenerator(client).generate(ISSUE)


@pytest.mark.asyncio
async def test_other_error_gives_placeholder(model_client_cls):
    client = model_client_cls([RuntimeError("server exploded")])
    assert await FixGenerator(client).generate(ISSUE) == placeholder_fix(ISSUE)


@pytest.mark.asyncio
async def test_unparseable_output_gives_placeholder(model_client_cls):
    assert await FixGenerator(model_client_cls(["nope"])).generate(ISSUE) == placeholder_fix(ISSUE)


@pytest.mark.asyncio
async def test_unconfigured_client_gives_placeholder(model_client_cls):
    client = model_client_cls()
    client.configured = False
    assert await FixGenerator(client).generate(ISSUE) == placeholder_fix(ISSUE)
    assert client.prompts == []


def test_placeholder_mentions_issue():
    fix = placeholder_fix(ISSUE)
    assert fix["explanation"]["before"] == "Missing meta description"
    assert fix["explanation"]["after"] == "Add one"
