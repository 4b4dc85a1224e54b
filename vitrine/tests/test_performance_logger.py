import os

from vitrine import performance_logger
from vitrine.models import FilterState
from vitrine.services.catalog_service import query


def test_disabled_profiler_records_nothing():
    query([], FilterState())
    assert performance_logger.get_function_stats() == {}


def test_profile_function_collects_stats(tmp_path):
    performance_logger.configure(enabled=True, logs_dir=str(tmp_path / 'logs'))

    @performance_logger.profile_function
    def soma(a, b):
        return a + b

    assert soma(2, 3) == 5
    soma(1, 1)
    query([], FilterState())

    stats = performance_logger.get_function_stats()
    assert stats['test_profile_function_collects_stats.<locals>.soma']['calls'] == 2
    assert stats['Filtrar vitrine']['calls'] == 1

    performance_logger.reset_stats()
    assert performance_logger.get_function_stats() == {}


def test_routes_are_logged_when_enabled(app, client, tmp_path):
    logs_dir = tmp_path / 'route-logs'
    performance_logger.configure(enabled=True, logs_dir=str(logs_dir))

    client.get('/api/carrinho')

    with open(os.path.join(str(logs_dir), 'performance.log'), encoding='utf-8') as f:
        content = f.read()
    assert 'Ação: Ver carrinho' in content
    assert 'Rota: GET /api/carrinho' in content


def test_slow_calls_go_to_slow_functions_log(tmp_path, monkeypatch):
    logs_dir = tmp_path / 'slow'
    performance_logger.configure(enabled=True, logs_dir=str(logs_dir))
    monkeypatch.setattr(performance_logger, 'SLOW_MS', 0)

    @performance_logger.profile_function(name="Montar vitrine")
    def montar():
        return []

    montar()

    with open(os.path.join(str(logs_dir), 'slow_functions.log'), encoding='utf-8') as f:
        assert 'Montar vitrine' in f.read()
