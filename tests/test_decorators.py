import asyncio

from sftui_cache.cache import command_cache


def test_results_are_memoized(cache):
    calls = []

    @command_cache(cache)
    def list_orgs(kind, verbose=False):
        calls.append((kind, verbose))
        return {"kind": kind, "verbose": verbose}

    assert list_orgs("scratch") == {"kind": "scratch", "verbose": False}
    assert list_orgs("scratch") == {"kind": "scratch", "verbose": False}
    assert list_orgs("scratch", verbose=True) == {"kind": "scratch", "verbose": True}

    assert calls == [("scratch", False), ("scratch", True)]


def test_skip_cache_argument_bypasses_and_is_not_forwarded(cache):
    calls = []

    @command_cache(cache)
    def fetch(name):
        calls.append(name)
        return name.upper()

    fetch("a")
    assert fetch("a", skip_cache=True) == "A"
    assert calls == ["a", "a"]


def test_condition_gates_population(cache):
    calls = []

    @command_cache(cache, condition=lambda result: bool(result))
    def search(term):
        calls.append(term)
        return []

    search("nothing")
    search("nothing")

    assert calls == ["nothing", "nothing"]


def test_custom_key_generator_and_helpers(cache):
    calls = []

    @command_cache(cache, key_prefix="org-display", key_generator=lambda org: f"org-display:{org}")
    def display(org):
        calls.append(org)
        return {"org": org}

    display("dev")
    assert display.cache_key("dev") == "org-display:dev"
    assert cache.has("org-display:dev")

    display.cache_delete("dev")
    display("dev")
    assert calls == ["dev", "dev"]

    assert display.cache_clear() == 1
    assert display.cache_stats().entries == 0


def test_values_come_back_from_a_restarted_cache(make_cache):
    calls = []

    def build(cache):
        @command_cache(cache, key_prefix="limits")
        def limits(org):
            calls.append(org)
            return {"org": org, "remaining": 15000}

        return limits

    build(make_cache())("dev")
    assert build(make_cache())("dev") == {"org": "dev", "remaining": 15000}
    assert calls == ["dev"]


def test_coroutine_functions_are_supported(cache):
    calls = []

    @command_cache(cache)
    async def describe(sobject):
        calls.append(sobject)
        return {"name": sobject}

    async def scenario():
        first = await describe("Account")
        second = await describe("Account")
        return first, second

    first, second = asyncio.run(scenario())

    assert first == second == {"name": "Account"}
    assert calls == ["Account"]


def test_cache_clear_leaves_commands_sharing_a_leading_segment(cache):
    @command_cache(cache, key_prefix="sf:org")
    def org(name):
        return {"org": name}

    @command_cache(cache, key_prefix="sf:org:list")
    def org_list(name):
        return {"list": name}

    org("dev")
    org_list("dev")

    assert org.cache_clear() == 1
    assert cache.has(org_list.cache_key("dev"))
    assert not cache.has(org.cache_key("dev"))
