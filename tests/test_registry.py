import threading

import pytest

from fragment_engine.assets import AssetLoader, DependencyRegistry
from fragment_engine.common import AssetLoadError, RuntimeConfig
from fragment_engine.networking import NetworkThread

from conftest import FakeFetcher, script


def make_loader(network, config, materialized=None):
    registry = DependencyRegistry()

    def materialize(ref, bodies):
        if materialized is not None:
            materialized.append((ref.name, [url for url, _ in bodies]))

    loader = AssetLoader(registry, network, materialize, config=config, sleep=lambda delay: None)
    return registry, loader


def test_claim_has_single_owner():
    registry = DependencyRegistry()
    ref = script("libA")

    first, owner_a = registry.claim(ref)
    second, owner_b = registry.claim(ref)

    assert owner_a is True
    assert owner_b is False
    assert first is second


def test_loaded_asset_is_never_claimed_again():
    registry = DependencyRegistry()
    ref = script("libA")
    registry.claim(ref)
    registry.mark_loaded(ref)

    future, owner = registry.claim(ref)

    assert owner is False
    assert future.done()
    assert registry.has(ref)
    assert registry.known() == frozenset({("libA", "1.0")})


def test_release_allows_retry():
    registry = DependencyRegistry()
    ref = script("libA")
    future, _ = registry.claim(ref)

    registry.release(ref, AssetLoadError(ref, "boom"))

    with pytest.raises(AssetLoadError):
        future.result(timeout=1)
    assert not registry.has(ref)
    _, owner = registry.claim(ref)
    assert owner is True


def test_concurrent_loads_fetch_once(network, fetcher, config):
    fetcher.delay = 0.05
    registry, loader = make_loader(network, config)
    ref = script("libA")
    barrier = threading.Barrier(8)
    futures = []

    def worker():
        barrier.wait()
        futures.append(loader.load(ref))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    for future in futures:
        future.result(timeout=5)

    assert fetcher.calls["https://cdn.test/libA.js"] == 1
    assert registry.has(ref)
    loader.shutdown()


def test_chain_loads_in_order(network, fetcher, config):
    materialized = []
    registry, loader = make_loader(network, config, materialized)

    loader.load_fragments([script("libA"), script("libB"), script("libC")])

    assert [name for name, _ in materialized] == ["libA", "libB", "libC"]
    assert len(registry) == 3
    loader.shutdown()


def test_multiple_urls_loaded_in_order(network, fetcher, config):
    materialized = []
    _, loader = make_loader(network, config, materialized)
    ref = script("bundle", urls=["https://cdn.test/core.js", "https://cdn.test/ext.js"])

    loader.load_fragments([ref])

    assert materialized == [("bundle", ["https://cdn.test/core.js", "https://cdn.test/ext.js"])]
    loader.shutdown()


def test_flaky_fetch_is_retried(network, fetcher, config):
    fetcher.flaky["https://cdn.test/libA.js"] = 2
    registry, loader = make_loader(network, config)

    loader.load_fragments([script("libA")])

    assert fetcher.calls["https://cdn.test/libA.js"] == 3
    assert registry.has(script("libA"))
    loader.shutdown()


def test_failure_after_retries_is_not_recorded(network, fetcher, config):
    fetcher.fail.add("https://cdn.test/libA.js")
    registry, loader = make_loader(network, config)

    with pytest.raises(AssetLoadError) as excinfo:
        loader.load_fragments([script("libA"), script("libB")])

    assert excinfo.value.ref.name == "libA"
    assert fetcher.calls["https://cdn.test/libA.js"] == config.max_retries + 1
    # 체인이 중단되어 뒤 에셋은 요청하지 않음
    assert fetcher.calls["https://cdn.test/libB.js"] == 0
    assert not registry.has(script("libA"))

    fetcher.fail.clear()
    loader.load_fragments([script("libA")])
    assert registry.has(script("libA"))
    loader.shutdown()


def test_parallel_chains_report_first_error_once(network, fetcher, config):
    fetcher.fail.add("https://cdn.test/broken.js")
    registry, loader = make_loader(network, config)

    with pytest.raises(AssetLoadError):
        loader.load_fragments([script("broken")], [script("fine")])

    assert registry.has(script("fine"))
    loader.shutdown()


def test_backoff_is_capped(config):
    config.backoff_base = 0.5
    config.backoff_max = 3.0

    assert [config.backoff(n) for n in range(5)] == [0.5, 1.0, 2.0, 3.0, 3.0]


def test_slow_asset_fails_only_after_every_retry():
    config = RuntimeConfig(max_retries=3, backoff_base=0.0, backoff_max=0.0,
                           fetch_timeout=0.2, load_timeout=0.5)
    fetcher = FakeFetcher(delay=0.3)
    network = NetworkThread(max_workers=4, fetch=fetcher, timeout=config.fetch_timeout)
    network.start()
    materialized = []
    registry, loader = make_loader(network, config, materialized)

    try:
        assert loader.load_wait(script("slow")) > config.load_timeout
        with pytest.raises(AssetLoadError) as excinfo:
            loader.load_fragments([script("slow")])
    finally:
        loader.shutdown()
        network.stop()

    # 대기하던 쪽이 먼저 포기하지 않고 소유 스레드의 최종 실패를 그대로 받음
    assert "after 4 attempt(s)" in str(excinfo.value)
    assert fetcher.calls["https://cdn.test/slow.js"] == 4
    assert materialized == []
    assert not registry.has(script("slow"))
