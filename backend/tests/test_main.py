import main


def test_resolve_port_keeps_configured_port():
    assert main.resolve_port("127.0.0.1", 8123) == 8123


def test_resolve_port_picks_free_port_for_zero():
    port = main.resolve_port("127.0.0.1", 0)
    assert 0 < port < 65536
