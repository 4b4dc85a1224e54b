from vitrine.app_container import AppContainer
from vitrine.config import build_shipping_policy, checkout_base_url, load_config


def test_load_config_has_shipping_defaults():
    settings = load_config()
    assert settings['FIXED_SHIPPING_SUBCATEGORY']
    assert 'WHATSAPP_NUMBER' in settings
    assert isinstance(settings['CATEGORIES'], tuple)


def test_policy_without_variable_rate_has_no_lookup():
    policy = build_shipping_policy({'FIXED_SHIPPING_RATE': '40', 'VARIABLE_SHIPPING_RATE': None})
    assert policy.fixed_rate == 40.0
    assert policy.fixed_subcategory == 'Calçados'
    assert policy.variable_rate_lookup is None


def test_policy_with_flat_variable_rate():
    policy = build_shipping_policy({'VARIABLE_SHIPPING_RATE': 22.5})
    assert policy.variable_rate_lookup('30668190') == 22.5


def test_checkout_base_url():
    assert checkout_base_url('5531999999999') == 'https://wa.me/5531999999999'


def test_container_builds_services_lazily(tmp_path):
    container = AppContainer({'DATA_DIR': str(tmp_path), 'CATEGORIES': ('Infantil',)})
    assert container.catalog_service is container.catalog_service
    assert container.product_service.categories == ('Infantil',)
    assert container.cart_service.checkout_url.startswith('https://wa.me/')

    first = container.catalog_repo
    container.reset()
    assert container.catalog_repo is not first
