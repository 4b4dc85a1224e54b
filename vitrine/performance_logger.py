# ==============================================================================
# PROFILING DE LA VITRINA
# ==============================================================================
# Mide el tiempo de cada request y de las funciones marcadas con
# @profile_function. Escribe líneas legibles en LOGS_DIR:
#   performance.log     -> una línea por request
#   slow_routes.log     -> requests por encima de los umbrales
#   slow_functions.log  -> llamadas lentas a funciones perfiladas
#
# ACTIVAR/DESACTIVAR: configure(enabled=...) o STORE_ENABLE_PROFILING=0
# ==============================================================================

import logging
import os
import threading
import time
from collections import defaultdict
from datetime import datetime
from functools import wraps
from typing import Dict, Optional

from vitrine import config

logger = logging.getLogger(__name__)

ENABLE_PROFILING = config.ENABLE_PROFILING
LOGS_DIR = config.LOGS_DIR

# Umbrales en milisegundos
SLOW_MS = 300
CRITICAL_MS = 700

# Acciones legibles por regla de Flask
ROUTE_NAMES = {
    'GET /api/produtos': 'Consultar vitrine',
    'GET /api/carrinho': 'Ver carrinho',
    'POST /api/carrinho/adicionar': 'Adicionar ao carrinho',
    'POST /api/carrinho/atualizar': 'Atualizar quantidade',
    'POST /api/carrinho/remover': 'Remover do carrinho',
    'POST /api/carrinho/limpar': 'Esvaziar carrinho',
    'POST /api/carrinho/frete': 'Calcular frete',
    'GET /api/carrinho/checkout': 'Finalizar compra',
    'GET /api/admin/produtos': 'Listar produtos (admin)',
    'POST /api/admin/produtos': 'Criar produto',
    'PUT /api/admin/produtos/<product_id>': 'Editar produto',
    'DELETE /api/admin/produtos/<product_id>': 'Excluir produto',
    'POST /api/admin/produtos/importar': 'Importar produtos',
    'GET /api/admin/produtos/exportar': 'Exportar produtos',
}

_write_lock = threading.Lock()
_stats_lock = threading.Lock()

# {nombre: {calls, total_time, max_time}}
_function_stats = defaultdict(lambda: {'calls': 0, 'total_time': 0.0, 'max_time': 0.0})


def configure(enabled: Optional[bool] = None, logs_dir: Optional[str] = None) -> None:
    """Cambia la configuración en tiempo de ejecución (create_app, tests)."""
    global ENABLE_PROFILING, LOGS_DIR
    if enabled is not None:
        ENABLE_PROFILING = bool(enabled)
    if logs_dir is not None:
        LOGS_DIR = logs_dir


def _severity(time_ms: float) -> Optional[str]:
    if time_ms >= CRITICAL_MS:
        return 'CRITICAL'
    if time_ms >= SLOW_MS:
        return 'WARNING'
    return None


def _append(filename: str, line: str) -> None:
    """Agrega una línea con timestamp al log indicado."""
    path = os.path.join(LOGS_DIR, filename)
    stamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
    try:
        with _write_lock:
            os.makedirs(LOGS_DIR, exist_ok=True)
            with open(path, 'a', encoding='utf-8') as f:
                f.write(f"[{stamp}] {line}\n")
    except OSError as e:
        # Un log que falla no debe romper la request
        logger.warning("No se pudo escribir %s: %s", path, e)


# ═══════════════════════════════════════════════════════════════════════════
# REQUESTS
# ═══════════════════════════════════════════════════════════════════════════

def _action_name(method: str, path: str, rule: str) -> str:
    return ROUTE_NAMES.get(f"{method} {rule}") or ROUTE_NAMES.get(f"{method} {path}") or f"{method} {path}"


def log_request(method: str, path: str, rule: str, time_ms: float) -> None:
    """
    Registra la duración de un request.

    Args:
        method: Método HTTP
        path: Ruta solicitada (/api/carrinho/adicionar)
        rule: Regla de Flask (/api/admin/produtos/<product_id>)
        time_ms: Duración en milisegundos
    """
    if not ENABLE_PROFILING:
        return

    action = _action_name(method, path, rule)
    _append('performance.log', f"Ação: {action} | Rota: {method} {path} | Tempo: {time_ms:.0f} ms")

    level = _severity(time_ms)
    if level:
        limit = CRITICAL_MS if level == 'CRITICAL' else SLOW_MS
        _append('slow_routes.log', f"{level} {action} ({method} {path}) {time_ms:.0f} ms > {limit} ms")


def init_profiling(app) -> None:
    """Registra los hooks before_request/after_request en la app."""
    from flask import g, request

    @app.before_request
    def _start_timer():
        g.start_time = time.perf_counter()

    @app.after_request
    def _log_request(response):
        if ENABLE_PROFILING and hasattr(g, 'start_time'):
            elapsed = (time.perf_counter() - g.start_time) * 1000
            rule = str(request.url_rule) if request.url_rule else request.path
            log_request(request.method, request.path, rule, elapsed)
        return response


# ═══════════════════════════════════════════════════════════════════════════
# FUNCIONES
# ═══════════════════════════════════════════════════════════════════════════

def profile_function(func=None, name=None):
    """
    Decorador que acumula estadísticas de tiempo de una función.

    Uso:
        @profile_function
        def query(...): ...

        @profile_function(name="Filtrar vitrine")
        def query(...): ...
    """
    def decorator(fn):
        label = name or fn.__qualname__

        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not ENABLE_PROFILING:
                return fn(*args, **kwargs)

            start = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                elapsed = (time.perf_counter() - start) * 1000
                with _stats_lock:
                    stats = _function_stats[label]
                    stats['calls'] += 1
                    stats['total_time'] += elapsed
                    stats['max_time'] = max(stats['max_time'], elapsed)

                level = _severity(elapsed)
                if level:
                    _append('slow_functions.log', f"{level} {label} {elapsed:.0f} ms")

        return wrapper

    if func is not None:
        return decorator(func)
    return decorator


def get_function_stats() -> Dict[str, Dict[str, float]]:
    """
    Estadísticas de las funciones perfiladas.

    Returns:
        {nombre: {calls, avg_time, max_time}} con tiempos en ms
    """
    with _stats_lock:
        return {
            label: {
                'calls': stats['calls'],
                'avg_time': round(stats['total_time'] / stats['calls'], 2) if stats['calls'] else 0,
                'max_time': round(stats['max_time'], 2),
            }
            for label, stats in _function_stats.items()
        }


def reset_stats() -> None:
    with _stats_lock:
        _function_stats.clear()
