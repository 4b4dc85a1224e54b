import os
import sys

import pytest

# ensure project root is on sys.path when running from tests/ folder
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..')))

from vitrine import performance_logger
from vitrine.main import create_app
from vitrine.models import Product, Review, ShippingPolicy
from vitrine.repositories import CatalogRepository


CATALOG = [
    {
        "id": 1,
        "name": "Slip On (1ª linha)",
        "price": "R$ 100,00",
        "imageUrls": ["https://example.com/slip-on.jpg"],
        "category": "Feminino",
        "subcategory": "Calçados",
        "description": "Tênis slip on confortável.",
        "reviews": [
            {"id": 1, "author": "Ana P.", "rating": 5, "comment": "Amei!", "date": "2024-05-20T10:00:00Z"},
        ],
    },
    {
        "id": 2,
        "name": "Blusa Básica",
        "price": "R$ 50,00",
        "imageUrls": [],
        "category": "Masculino",
        "subcategory": "Blusas",
    },
    {
        "id": 3,
        "name": "Vestido Floral",
        "price": "R$ 1.250,00",
        "imageUrls": [],
        "category": "Feminino",
        "subcategory": "Vestidos",
    },
    {
        "id": 4,
        "name": "Tênis Casual",
        "price": "R$ 5,00",
        "imageUrls": [],
        "category": "Masculino",
        "subcategory": "Calçados",
    },
]


@pytest.fixture(autouse=True)
def no_profiling(tmp_path):
    performance_logger.configure(enabled=False, logs_dir=str(tmp_path / 'logs'))
    performance_logger.reset_stats()
    yield
    performance_logger.reset_stats()


def make_product(id=1, name="Produto", price="R$ 10,00", category="Feminino",
                 subcategory="Blusas", **extra):
    return Product(id=id, name=name, price=price, category=category,
                   subcategory=subcategory, **extra)


@pytest.fixture
def p1():
    return make_product(1, "Slip On", "R$ 100,00", "Feminino", "Calçados",
                        reviews=(Review(id=1, author="Ana P.", rating=5),))


@pytest.fixture
def p2():
    return make_product(2, "Blusa Básica", "R$ 50,00", "Masculino", "Blusas")


@pytest.fixture
def policy():
    return ShippingPolicy(fixed_subcategory="Calçados", fixed_rate=35.0)


@pytest.fixture
def catalog_repo(tmp_path):
    repo = CatalogRepository(str(tmp_path / 'data'))
    repo.save_all([dict(r) for r in CATALOG])
    return repo


@pytest.fixture
def app(tmp_path, catalog_repo):
    app = create_app({
        'SECRET_KEY': 'test-secret',
        'DATA_DIR': str(tmp_path / 'data'),
        'LOGS_DIR': str(tmp_path / 'logs'),
        'ENABLE_PROFILING': False,
        'VARIABLE_SHIPPING_RATE': 25.0,
        'WHATSAPP_NUMBER': '5531999999999',
    })
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c
