import json

import pytest

from vitrine.repositories import CatalogRepository
from vitrine.services.money import PRICE_INPUT_ERROR
from vitrine.services.product_service import ProductService

from conftest import CATALOG


@pytest.fixture
def service(catalog_repo):
    return ProductService(catalog_repo)


def new_product(**overrides):
    data = {
        "name": "Bermuda Sarja",
        "price": "R$ 89,90",
        "imageUrls": ["https://example.com/bermuda.jpg"],
        "category": "Masculino",
        "subcategory": "Bermudas",
    }
    data.update(overrides)
    return data


def test_create_product_assigns_next_id(service, catalog_repo):
    result = service.create_product(new_product(name="  Bermuda Sarja  "))
    assert result['ok'] is True
    assert result['produto']['id'] == 5
    assert result['produto']['name'] == "Bermuda Sarja"
    assert catalog_repo.get_by_id(5)['price'] == "R$ 89,90"


@pytest.mark.parametrize("price", ["R$ 89,9", "89,90", "R$ 1234,56", 89.9, None])
def test_create_rejects_invalid_price_and_saves_nothing(service, catalog_repo, price):
    result = service.create_product(new_product(price=price))
    assert result == {'ok': False, 'error': PRICE_INPUT_ERROR}
    assert len(catalog_repo.get_all()) == len(CATALOG)


@pytest.mark.parametrize("overrides, fragment", [
    ({"name": ""}, "Nome"),
    ({"category": "Unissex"}, "Categoria inválida"),
    ({"subcategory": " "}, "Subcategoria"),
    ({"reviews": [{"author": "X", "rating": 6}]}, "Avaliação"),
])
def test_create_rejects_incomplete_data(service, overrides, fragment):
    result = service.create_product(new_product(**overrides))
    assert result['ok'] is False
    assert fragment in result['error']


def test_create_rejects_non_object(service):
    assert service.create_product(["not", "a", "product"])['ok'] is False


def test_update_product_keeps_id_and_merges(service, catalog_repo):
    result = service.update_product(2, {"price": "R$ 59,90", "id": 77})
    assert result['ok'] is True
    saved = catalog_repo.get_by_id(2)
    assert saved['price'] == "R$ 59,90"
    assert saved['name'] == "Blusa Básica"
    assert catalog_repo.get_by_id(77) is None


def test_update_validates_merged_record(service, catalog_repo):
    result = service.update_product("2", {"price": "59,90"})
    assert result['ok'] is False
    assert catalog_repo.get_by_id(2)['price'] == "R$ 50,00"


def test_update_unknown_product(service):
    assert service.update_product(99, {"name": "X"}) == {'ok': False, 'error': 'Produto não encontrado'}


def test_delete_product(service, catalog_repo):
    removed = service.delete_product(3)
    assert removed['name'] == "Vestido Floral"
    assert catalog_repo.get_by_id(3) is None
    assert service.delete_product(3) is None


def test_import_requires_a_list(service):
    result = service.import_products({"produtos": []})
    assert result == {'ok': False, 'error': 'O arquivo JSON deve conter um array de produtos.'}


def test_import_replaces_catalog_and_reassigns_ids(service, catalog_repo):
    payload = [new_product(id=40), new_product(id="abc", name="Vestido Longo",
                                               category="Feminino", subcategory="Vestidos")]
    result = service.import_products(payload)
    assert result['ok'] is True
    assert result['importados'] == 2
    assert result['mensagem'] == "2 produtos importados com sucesso!"
    assert [r['id'] for r in catalog_repo.get_all()] == [1, 2]
    assert catalog_repo.get_by_id(2)['name'] == "Vestido Longo"


def test_import_with_invalid_entry_changes_nothing(service, catalog_repo):
    payload = [new_product(), new_product(price="R$ 1,0")]
    result = service.import_products(payload)
    assert result['ok'] is False
    assert result['error'].startswith("Produto 2:")
    assert len(catalog_repo.get_all()) == len(CATALOG)


def test_export_matches_import_format(service, tmp_path):
    exported = service.export_products()
    assert exported[0]['reviews'][0]['author'] == "Ana P."
    assert 'description' not in exported[1]

    other = ProductService(CatalogRepository(str(tmp_path / 'copia')))
    assert other.import_products(json.loads(json.dumps(exported)))['ok'] is True
    assert other.export_products() == exported
