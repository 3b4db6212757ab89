"""
Static menu catalog.

Each category holds a list of menu items. An item is either a single
priced unit ({item, price, slug, image}) or a set of size variants
({item, image, variants: [{size, price, slug, item}]}); a variant may
carry its own image. Every purchasable unit (a single item or one
variant) carries a slug that is unique across the whole catalog.
"""
from typing import Dict, Iterator, List, Optional, Any


CATEGORIES = [
    {'id': 'biryaniSpecial', 'label': 'Biryani Special', 'image': '/half-portion-mutton-biryani.jpg'},
    {'id': 'rotiItems', 'label': 'Roti & Naan', 'image': '/plain-naan-bread.jpg'},
    {'id': 'gravyItems', 'label': 'Gravy Items', 'image': '/kadai-chicken-curry.jpg'},
    {'id': 'tandooriSpecial', 'label': 'Tandoori Special', 'image': '/tandoori.png'},
    {'id': 'nihariItems', 'label': 'Nihari & More', 'image': '/paya.png'},
    {'id': 'desserts', 'label': 'Desserts', 'image': '/apricot.png'},
]

MENU: Dict[str, List[Dict[str, Any]]] = {
    'biryaniSpecial': [
        {
            'item': 'mutton biryani',
            'image': '/mutton-biryani-rice-dish.jpg',
            'variants': [
                {'size': 'full', 'price': 450, 'slug': 'mutton-biryani-full', 'item': 'mutton biryani full'},
                {'size': 'half', 'price': 350, 'slug': 'mutton-biryani-half', 'item': 'mutton biryani half',
                 'image': '/half-portion-mutton-biryani.jpg'},
            ],
        },
        {
            'item': 'chiken biryani',
            'image': '/chicken-biryani-full-plate.jpg',
            'variants': [
                {'size': 'full', 'price': 250, 'slug': 'chicken-biryani-full', 'item': 'chiken biryani full'},
                {'size': 'half', 'price': 150, 'slug': 'chicken-biryani-half', 'item': 'chiken biryani half',
                 'image': '/chicken-biryani-half-portion.jpg'},
            ],
        },
        {'item': 'chiken tikka biryani', 'price': 280, 'slug': 'chicken-tikka-biryani', 'image': '/chicken-tikka-biryani.jpg'},
        {'item': 'chiken tangdi biryani full', 'price': 280, 'slug': 'chicken-tangdi-biryani-full', 'image': '/chicken-leg-biryani.jpg'},
        {'item': 'roast biryani full', 'price': 150, 'slug': 'roast-biryani-full', 'image': '/roast-biryani.jpg'},
    ],
    'rotiItems': [
        {'item': 'Tandoori roti', 'price': 20, 'slug': 'tandoori-roti', 'image': '/tandoori-roti-bread.jpg'},
        {'item': 'Plain naan', 'price': 30, 'slug': 'plain-naan', 'image': '/plain-naan-bread.jpg'},
        {'item': 'butter naan', 'price': 40, 'slug': 'butter-naan', 'image': '/butter-naan.png'},
        {'item': 'Garlic naan', 'price': 40, 'slug': 'garlic-naan', 'image': '/garlic-naan.png'},
        {'item': 'Cheese naan', 'price': 40, 'slug': 'cheese-naan', 'image': '/cheese-naan-bread.jpg'},
        {'item': 'kulch', 'price': 20, 'slug': 'kulch', 'image': '/kulcha-bread.jpg'},
        {'item': 'butter kulch', 'price': 25, 'slug': 'butter-kulch', 'image': '/butter-kulcha-bread.jpg'},
    ],
    'gravyItems': [
        {'item': 'Murg musallam', 'price': 180, 'slug': 'murg-musallam', 'image': '/murg-musallam-chicken-curry.jpg'},
        {'item': 'hydrabadi dum chicken', 'price': 180, 'slug': 'hyderabadi-dum-chicken', 'image': '/hyderabadi-dum-chicken.jpg'},
        {'item': 'kadai chicken', 'price': 180, 'slug': 'kadai-chicken', 'image': '/kadai-chicken-curry.jpg'},
        {'item': 'shahi chicken', 'price': 200, 'slug': 'shahi-chicken', 'image': '/shahi-korma.webp'},
    ],
    'tandooriSpecial': [
        {
            'item': 'Tandoori Chicken',
            'image': '/tandoori.png',
            'variants': [
                {'size': 'half', 'price': 250, 'slug': 'tandoori-chicken-half', 'item': 'Tandoori Chicken half'},
                {'size': 'full', 'price': 450, 'slug': 'tandoori-chicken-full', 'item': 'Tandoori Chicken full'},
            ],
        },
        {'item': 'Chicken tikka', 'price': 180, 'slug': 'chicken-tikka', 'image': '/chicken-tikka.png'},
        {'item': 'Malai kabab', 'price': 180, 'slug': 'malai-kabab', 'image': '/malai-kabab.png'},
        {'item': 'Haryali kabab', 'price': 180, 'slug': 'haryali-kabab', 'image': '/haryali-kabab.png'},
        {'item': 'Reshmi kabab', 'price': 180, 'slug': 'reshmi-kabab', 'image': '/reshmi-kabab.png'},
        {'item': 'afghani kabab', 'price': 180, 'slug': 'afghani-kabab', 'image': '/afghani-kabab.png'},
        {'item': 'labda kabab', 'price': 180, 'slug': 'labda-kabab', 'image': '/labda-kabab.png'},
        {'item': 'tangdi kabab', 'price': 180, 'slug': 'tangdi-kabab', 'image': '/tangadi-kabab.png'},
        {'item': 'sultani kabab', 'price': 180, 'slug': 'sultani-kabab', 'image': '/sultani-kabab.png'},
    ],
    'nihariItems': [
        {'item': 'Paya', 'price': 180, 'slug': 'paya', 'image': '/paya.png'},
        {'item': 'bheja fry', 'price': 180, 'slug': 'bheja-fry', 'image': '/bheja-fry.png'},
    ],
    'desserts': [
        {'item': 'Apricot delight', 'price': 100, 'slug': 'apricot-delight', 'image': '/apricot.png'},
        {'item': 'shatoot malai', 'price': 120, 'slug': 'shatoot-malai', 'image': '/shatoot.png'},
        {'item': 'kubani ka mitha', 'price': 40, 'slug': 'kubani-ka-mitha', 'image': '/kubani.png'},
        {'item': 'kaddu ka kheer', 'price': 80, 'slug': 'kaddu-ka-kheer', 'image': '/khadu.png'},
        {'item': 'sitaphal malai', 'price': 150, 'slug': 'sitaphal-malai', 'image': '/sitaphal.png'},
    ],
}

# Slugs whose stock is tracked by the stock ledger
STOCK_TRACKED_SLUGS = frozenset(item['slug'] for item in MENU['desserts'])

# Canonical display names for stock records
STOCK_ITEM_NAMES = {
    'apricot-delight': 'Apricot delight',
    'shatoot-malai': 'shatoot malai',
    'kubani-ka-mitha': 'kubani ka mitha',
    'kaddu-ka-kheer': 'kaddu ka kheer',
    'sitaphal-malai': 'sitaphal malai',
}

# Seed values for `initialize`
DEFAULT_DESSERT_STOCK = [
    {'slug': 'apricot-delight', 'stock': 5},
    {'slug': 'shatoot-malai', 'stock': 0},
    {'slug': 'kubani-ka-mitha', 'stock': 10},
    {'slug': 'kaddu-ka-kheer', 'stock': 8},
    {'slug': 'sitaphal-malai', 'stock': 3},
]


class DuplicateSlugError(ValueError):
    """Raised when two purchasable units share a slug."""


def is_variant_item(item: Dict[str, Any]) -> bool:
    return bool(item.get('variants'))


def iter_units(menu: Optional[Dict[str, List[Dict[str, Any]]]] = None) -> Iterator[Dict[str, Any]]:
    """
    Yield every purchasable unit in the catalog as a flat cart-ready dict.

    Variant items expand to one unit per variant; a variant's own image
    wins over the parent's.
    """
    menu = MENU if menu is None else menu
    for category, items in menu.items():
        for item in items:
            if is_variant_item(item):
                for variant in item['variants']:
                    yield {
                        'slug': variant['slug'],
                        'item': variant['item'],
                        'price': variant['price'],
                        'image': variant.get('image') or item.get('image'),
                        'size': variant.get('size'),
                        'category': category,
                    }
            else:
                yield {
                    'slug': item['slug'],
                    'item': item['item'],
                    'price': item['price'],
                    'image': item.get('image'),
                    'size': None,
                    'category': category,
                }


def validate_unique_slugs(menu: Optional[Dict[str, List[Dict[str, Any]]]] = None) -> None:
    """Raise DuplicateSlugError if any slug appears more than once."""
    seen = set()
    for unit in iter_units(menu):
        if unit['slug'] in seen:
            raise DuplicateSlugError(f"Duplicate catalog slug: {unit['slug']}")
        seen.add(unit['slug'])


def find_unit(slug: str) -> Optional[Dict[str, Any]]:
    """Look up a purchasable unit by slug."""
    return _UNITS_BY_SLUG.get(slug)


def price_for_name(name: str) -> Optional[int]:
    """Price of the unit whose display name matches, or None."""
    for unit in _UNITS_BY_SLUG.values():
        if unit['item'] == name:
            return unit['price']
    return None


def stock_item_name(slug: str) -> str:
    """Display name for a stock record; unknown slugs pass through."""
    return STOCK_ITEM_NAMES.get(slug, slug)


def menu_with_stock(stock_map: Dict[str, int]) -> List[Dict[str, Any]]:
    """
    Build the menu sections with live stock merged into desserts.

    Desserts without a stock record are returned unchanged.
    """
    sections = []
    for category in CATEGORIES:
        items = []
        for item in MENU[category['id']]:
            item = dict(item)
            slug = item.get('slug')
            if category['id'] == 'desserts' and slug in stock_map:
                item['stock'] = stock_map[slug]
            items.append(item)
        sections.append({
            'id': category['id'],
            'title': category['label'],
            'image': category['image'],
            'items': items,
        })
    return sections


validate_unique_slugs()
_UNITS_BY_SLUG = {unit['slug']: unit for unit in iter_units()}
