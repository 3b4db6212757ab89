"""
Unit tests for the static menu catalog.
"""

import pytest
from restaurant import catalog


class TestCatalog:
    """Tests for catalog lookups."""

    def test_catalog_slugs_are_unique(self):
        catalog.validate_unique_slugs()
        slugs = [unit['slug'] for unit in catalog.iter_units()]
        assert len(slugs) == len(set(slugs))

    def test_duplicate_slug_is_rejected(self):
        menu = {
            'a': [{'item': 'Paya', 'price': 1, 'slug': 'paya', 'image': None}],
            'b': [{'item': 'Mutton', 'image': None, 'variants': [
                {'size': 'full', 'price': 2, 'slug': 'paya', 'item': 'Mutton full'},
            ]}],
        }
        with pytest.raises(catalog.DuplicateSlugError):
            catalog.validate_unique_slugs(menu)

    def test_find_variant_unit(self):
        unit = catalog.find_unit('mutton-biryani-half')

        assert unit['item'] == 'mutton biryani half'
        assert unit['price'] == 350
        assert unit['size'] == 'half'
        assert unit['category'] == 'biryaniSpecial'

    def test_variant_image_overrides_parent(self):
        assert catalog.find_unit('mutton-biryani-half')['image'] == '/half-portion-mutton-biryani.jpg'
        assert catalog.find_unit('chicken-biryani-half')['image'] == '/chicken-biryani-half-portion.jpg'
        assert catalog.find_unit('mutton-biryani-full')['image'] == '/mutton-biryani-rice-dish.jpg'

    def test_find_single_unit(self):
        unit = catalog.find_unit('paya')
        assert unit['price'] == 180
        assert unit['size'] is None

    def test_find_unknown_unit(self):
        assert catalog.find_unit('pizza') is None

    def test_stock_tracked_slugs_are_desserts(self):
        assert catalog.STOCK_TRACKED_SLUGS == {
            'apricot-delight', 'shatoot-malai', 'kubani-ka-mitha', 'kaddu-ka-kheer', 'sitaphal-malai'
        }

    def test_stock_item_name(self):
        assert catalog.stock_item_name('kubani-ka-mitha') == 'kubani ka mitha'
        assert catalog.stock_item_name('mystery-sweet') == 'mystery-sweet'

    def test_price_for_name(self):
        assert catalog.price_for_name('Tandoori Chicken full') == 450
        assert catalog.price_for_name('Unknown dish') is None

    def test_menu_with_stock_merges_known_desserts_only(self):
        sections = catalog.menu_with_stock({'apricot-delight': 4})
        desserts = next(s for s in sections if s['id'] == 'desserts')

        apricot = next(i for i in desserts['items'] if i['slug'] == 'apricot-delight')
        shatoot = next(i for i in desserts['items'] if i['slug'] == 'shatoot-malai')
        assert apricot['stock'] == 4
        assert 'stock' not in shatoot
        # Static data is not mutated
        assert 'stock' not in catalog.MENU['desserts'][0]
