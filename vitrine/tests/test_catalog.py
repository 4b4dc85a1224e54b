import pytest
from werkzeug.datastructures import MultiDict

from vitrine.models import FilterState, PriceRange, Product, SortOrder
from vitrine.services.catalog_service import (
    CatalogService,
    available_subcategories,
    group_by_category,
    query,
)

from conftest import CATALOG, make_product


@pytest.fixture
def products():
    return [Product.from_dict(raw) for raw in CATALOG]


def ids(products):
    return [p.id for p in products]


# ---------------------------------------------------------------------------
# Filtros
# ---------------------------------------------------------------------------

def test_empty_category_set_means_no_restriction(products):
    everything = query(products, FilterState())
    explicit = query(products, FilterState(categories=frozenset({'Feminino', 'Masculino', 'Infantil'})))
    assert ids(everything) == ids(explicit) == [1, 2, 3, 4]


def test_category_filter(products):
    result = query(products, FilterState(categories=frozenset({'Feminino'})))
    assert ids(result) == [1, 3]


def test_search_is_case_insensitive_on_name_and_subcategory(products):
    assert ids(query(products, FilterState(search='VESTIDO'))) == [3]
    assert ids(query(products, FilterState(search='calçados'))) == [1, 4]


def test_search_and_subcategory_combine(products):
    filters = FilterState(search='t', subcategories=frozenset({'Calçados'}))
    assert ids(query(products, filters)) == [4]


def test_subcategory_filter(products):
    assert ids(query(products, FilterState(subcategories=frozenset({'Blusas', 'Vestidos'})))) == [2, 3]


def test_price_range_is_inclusive(products):
    filters = FilterState(price_range=PriceRange(min=50, max=100))
    assert ids(query(products, filters)) == [1, 2]
    assert ids(query(products, FilterState(price_range=PriceRange(min=1000)))) == [3]
    assert ids(query(products, FilterState(price_range=PriceRange(max=5)))) == [4]


def test_search_tolerates_null_fields_in_catalog(products):
    broken = Product.from_dict({'id': 9, 'name': None, 'price': None, 'category': 'Feminino', 'subcategory': None})
    assert broken.name == '' and broken.subcategory == '' and broken.price == ''
    assert ids(query(products + [broken], FilterState(search='vestido', sort=SortOrder.NAME_ASC))) == [3]


def test_query_does_not_mutate_input(products):
    before = list(products)
    query(products, FilterState(sort=SortOrder.PRICE_DESC, categories=frozenset({'Feminino'})))
    assert products == before


# ---------------------------------------------------------------------------
# Orden
# ---------------------------------------------------------------------------

def test_sort_by_price(products):
    assert ids(query(products, FilterState(sort=SortOrder.PRICE_ASC))) == [4, 2, 1, 3]
    assert ids(query(products, FilterState(sort=SortOrder.PRICE_DESC))) == [3, 1, 2, 4]


def test_sort_is_stable_for_ties():
    items = [
        make_product(1, "B", "R$ 10,00"),
        make_product(2, "A", "R$ 10,00"),
        make_product(3, "C", "R$ 5,00"),
    ]
    assert ids(query(items, FilterState(sort=SortOrder.PRICE_ASC))) == [3, 1, 2]
    assert ids(query(items, FilterState(sort=SortOrder.PRICE_DESC))) == [1, 2, 3]


def test_sort_by_name_respects_accents():
    names = ["Óculos", "Calça", "Blusa", "Ártico"]
    items = [make_product(i, name) for i, name in enumerate(names)]

    asc = query(items, FilterState(sort=SortOrder.NAME_ASC))
    assert [p.name for p in asc] == ["Ártico", "Blusa", "Calça", "Óculos"]

    desc = query(items, FilterState(sort=SortOrder.NAME_DESC))
    assert [p.name for p in desc] == ["Óculos", "Calça", "Blusa", "Ártico"]


def test_default_sort_keeps_catalog_order(products):
    shuffled = [products[2], products[0], products[3], products[1]]
    assert ids(query(shuffled, FilterState())) == [3, 1, 4, 2]


# ---------------------------------------------------------------------------
# Agrupación
# ---------------------------------------------------------------------------

def test_group_by_category_uses_display_order(products):
    reversed_data = list(reversed(products))
    grouped = group_by_category(reversed_data, ('Feminino', 'Masculino', 'Infantil'))
    assert list(grouped) == ['Feminino', 'Masculino']
    assert ids(grouped['Feminino']) == [3, 1]


def test_group_by_category_puts_unknown_categories_last(products):
    extra = make_product(9, "Boné", category="Unissex", subcategory="Acessórios")
    grouped = group_by_category([extra] + products)
    assert list(grouped) == ['Feminino', 'Masculino', 'Unissex']


def test_group_by_category_empty():
    assert group_by_category([]) == {}


def test_available_subcategories(products):
    options = available_subcategories(products)
    assert options['Feminino'] == ['Calçados', 'Vestidos']
    assert options['Masculino'] == ['Blusas', 'Calçados']
    assert options['Infantil'] == []


# ---------------------------------------------------------------------------
# FilterState
# ---------------------------------------------------------------------------

def test_filter_state_from_query_args():
    args = MultiDict([
        ('categoria', 'Feminino'),
        ('categoria', 'Infantil'),
        ('subcategoria', 'Blusas'),
        ('busca', 'floral'),
        ('preco_min', '10'),
        ('preco_max', '200'),
        ('ordem', 'price-desc'),
    ])
    state = FilterState.from_args(args)
    assert state.categories == frozenset({'Feminino', 'Infantil'})
    assert state.subcategories == frozenset({'Blusas'})
    assert state.search == 'floral'
    assert state.price_range == PriceRange(10, 200)
    assert state.sort == SortOrder.PRICE_DESC


def test_filter_state_ignores_bad_values():
    state = FilterState.from_args(MultiDict([('preco_min', '1e3'), ('preco_max', '-5'), ('ordem', 'random')]))
    assert state.price_range == PriceRange()
    state = FilterState.from_args(MultiDict([('preco_min', '²'), ('preco_max', '١٢'), ('ordem', 'random')]))
    assert state.price_range == PriceRange()
    assert state.sort == SortOrder.DEFAULT
    assert not state.has_active_filters


def test_cleared_keeps_search_and_sort():
    state = FilterState(
        categories=frozenset({'Feminino'}),
        price_range=PriceRange(max=100),
        search='blusa',
        sort=SortOrder.NAME_ASC,
    )
    assert state.has_active_filters
    cleared = state.cleared()
    assert not cleared.has_active_filters
    assert cleared.search == 'blusa'
    assert cleared.sort == SortOrder.NAME_ASC


# ---------------------------------------------------------------------------
# CatalogService
# ---------------------------------------------------------------------------

def test_catalog_service_reads_repository(catalog_repo):
    service = CatalogService(catalog_repo)
    assert len(service.list_products()) == 4
    assert service.get_product('3').name == 'Vestido Floral'
    assert service.get_product(99) is None

    grouped = service.search(FilterState(sort=SortOrder.PRICE_ASC))
    assert ids(grouped['Masculino']) == [4, 2]
    assert service.subcategory_options()['Masculino'] == ['Blusas', 'Calçados']
