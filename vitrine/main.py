# ==============================================================================
# APLICACIÓN WEB - Rutas JSON de la vitrina, carrito y panel admin
# ==============================================================================
# Las rutas solo traducen HTTP <-> servicios. Toda la lógica vive en services/.
# El carrito de cada cliente vive en su propia sesión de Flask.
#
# Acceso al panel admin: se controla en el despliegue (proxy), no aquí.
# ==============================================================================

import json
import logging
import os
from typing import Any, Dict, Optional

from flask import Flask, Response, request
from werkzeug.utils import secure_filename

from vitrine import performance_logger
from vitrine.app_container import AppContainer
from vitrine.config import load_config
from vitrine.models import FilterState

logger = logging.getLogger(__name__)

ALLOWED_IMPORT_EXTENSIONS = {"json"}


def to_int(v, default=None):
    try:
        return int(v)
    except (TypeError, ValueError):
        return default


def _product_id(raw):
    """IDs numéricos como int; cualquier otro valor se mantiene como str."""
    value = to_int(raw)
    return value if value is not None else raw


def _status_for(result: Dict[str, Any], error_status: int = 400):
    return result, (200 if result.get('ok') else error_status)


def create_app(config_overrides: Optional[Dict[str, Any]] = None) -> Flask:
    """
    Crea la app Flask.

    Args:
        config_overrides: Valores que reemplazan la configuración de entorno
                          (DATA_DIR, FIXED_SHIPPING_RATE, ...)

    Returns:
        Aplicación lista para WSGI o test_client()
    """
    app = Flask(__name__)
    app.config.update(load_config())
    if config_overrides:
        app.config.update(config_overrides)

    # Configuración de cookies de sesión
    app.secret_key = app.config['SECRET_KEY']
    app.config.update(
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE='Lax',
    )
    app.json.ensure_ascii = False

    container = AppContainer(dict(app.config))
    app.extensions['vitrine'] = container

    performance_logger.configure(
        enabled=app.config['ENABLE_PROFILING'],
        logs_dir=app.config['LOGS_DIR']
    )
    performance_logger.init_profiling(app)

    # ═══════════════════════════════════════════════════════════════════════
    # API: VITRINE
    # ═══════════════════════════════════════════════════════════════════════

    @app.route("/api/produtos", methods=["GET"])
    def api_produtos():
        """Catálogo filtrado, ordenado y agrupado por categoría."""
        filters = FilterState.from_args(request.args)
        grouped = container.catalog_service.search(filters)
        return {
            "ok": True,
            "categorias": {
                category: [p.to_dict() for p in products]
                for category, products in grouped.items()
            },
            "total": sum(len(products) for products in grouped.values()),
            "filtros_ativos": filters.has_active_filters,
            "subcategorias": container.catalog_service.subcategory_options(),
        }

    # ═══════════════════════════════════════════════════════════════════════
    # API: CARRINHO (session-based)
    # ═══════════════════════════════════════════════════════════════════════

    @app.route("/api/carrinho", methods=["GET"])
    def api_carrinho_ver():
        """Ver contenido actual del carrito"""
        return container.cart_service.get_cart()

    @app.route("/api/carrinho/adicionar", methods=["POST"])
    def api_carrinho_adicionar():
        """
        Agregar producto al carrito.
        Espera JSON con: produto_id, quantidade (opcional, default 1)
        """
        data = request.get_json(silent=True)
        if not data or not isinstance(data, dict):
            return {"ok": False, "error": "Dados não recebidos ou formato inválido"}, 400

        quantidade = to_int(data.get("quantidade", 1))
        result = container.cart_service.add_item(_product_id(data.get("produto_id")), quantidade)
        if not result['ok'] and result['error'] == 'Produto não encontrado':
            return result, 404
        return _status_for(result)

    @app.route("/api/carrinho/atualizar", methods=["POST"])
    def api_carrinho_atualizar():
        """Fijar cantidad de un ítem (0 o menos lo elimina)"""
        data = request.get_json(silent=True)
        if not data or not isinstance(data, dict):
            return {"ok": False, "error": "Dados não recebidos"}, 400

        quantidade = to_int(data.get("quantidade"))
        if quantidade is None:
            return {"ok": False, "error": "Quantidade inválida"}, 400
        return _status_for(
            container.cart_service.update_quantity(_product_id(data.get("produto_id")), quantidade)
        )

    @app.route("/api/carrinho/remover", methods=["POST"])
    def api_carrinho_remover():
        """Eliminar un item específico del carrito"""
        data = request.get_json(silent=True)
        if not data or not isinstance(data, dict):
            return {"ok": False, "error": "Dados não recebidos"}, 400
        return container.cart_service.remove_item(_product_id(data.get("produto_id")))

    @app.route("/api/carrinho/limpar", methods=["POST"])
    def api_carrinho_limpar():
        """Vaciar el carrito"""
        return container.cart_service.clear_cart()

    @app.route("/api/carrinho/frete", methods=["POST"])
    def api_carrinho_frete():
        """Calcular frete por CEP"""
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = {}
        result = container.cart_service.resolve_shipping(str(data.get("cep") or ""))
        return _status_for(result, 422)

    @app.route("/api/carrinho/checkout", methods=["GET"])
    def api_carrinho_checkout():
        """Mensaje y link de WhatsApp (409 mientras falte el frete)"""
        result = container.cart_service.checkout()
        if 'pronto' not in result:
            return result, 400
        return _status_for(result, 409)

    # ═══════════════════════════════════════════════════════════════════════
    # API: ADMIN DE PRODUTOS
    # ═══════════════════════════════════════════════════════════════════════

    @app.route("/api/admin/produtos", methods=["GET"])
    def api_admin_listar():
        return {"ok": True, "produtos": container.product_service.list_products()}

    @app.route("/api/admin/produtos", methods=["POST"])
    def api_admin_criar():
        result = container.product_service.create_product(request.get_json(silent=True))
        if result['ok']:
            return result, 201
        return result, 400

    @app.route("/api/admin/produtos/<product_id>", methods=["PUT"])
    def api_admin_editar(product_id):
        result = container.product_service.update_product(
            _product_id(product_id), request.get_json(silent=True)
        )
        if not result['ok'] and result['error'] == 'Produto não encontrado':
            return result, 404
        return _status_for(result)

    @app.route("/api/admin/produtos/<product_id>", methods=["DELETE"])
    def api_admin_excluir(product_id):
        removed = container.product_service.delete_product(_product_id(product_id))
        if not removed:
            return {"ok": False, "error": "Produto não encontrado"}, 404
        return {"ok": True, "mensagem": "Produto excluído", "produto": removed}

    @app.route("/api/admin/produtos/importar", methods=["POST"])
    def api_admin_importar():
        """
        Importar catálogo: archivo 'arquivo' (multipart) o JSON en el body.
        Reemplaza todos los productos.
        """
        file = request.files.get("arquivo")
        if file is not None:
            filename = secure_filename(file.filename or "")
            ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
            if ext not in ALLOWED_IMPORT_EXTENSIONS:
                return {"ok": False, "error": "Envie um arquivo .json"}, 400
            try:
                payload = json.load(file.stream)
            except (UnicodeDecodeError, json.JSONDecodeError) as e:
                return {"ok": False, "error": f"Erro ao importar: {e}"}, 400
            logger.info("Importando catálogo do arquivo %s", filename)
        else:
            payload = request.get_json(silent=True)

        return _status_for(container.product_service.import_products(payload))

    @app.route("/api/admin/produtos/exportar", methods=["GET"])
    def api_admin_exportar():
        """Descargar el catálogo como produtos.json"""
        body = json.dumps(container.product_service.export_products(), ensure_ascii=False, indent=2)
        return Response(
            body,
            mimetype="application/json",
            headers={"Content-Disposition": "attachment;filename=produtos.json"}
        )

    return app


if __name__ == "__main__":
    # En producción usar WSGI (gunicorn wsgi:app)
    DEBUG = os.environ.get('FLASK_DEBUG', '0') == '1'
    HOST = os.environ.get('FLASK_HOST', '127.0.0.1')
    PORT = int(os.environ.get('FLASK_PORT', 5000))
    create_app().run(debug=DEBUG, host=HOST, port=PORT)
