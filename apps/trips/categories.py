"""Starter set of expense categories offered for every trip."""

EXPENSE_CATEGORIES = [
    {'name': 'Food', 'color': 'orange', 'icon': 'fa-utensils'},
    {'name': 'Transport', 'color': 'blue', 'icon': 'fa-car'},
    {'name': 'Accommodation', 'color': 'purple', 'icon': 'fa-hotel'},
    {'name': 'Shopping', 'color': 'pink', 'icon': 'fa-shopping-bag'},
    {'name': 'Entertainment', 'color': 'indigo', 'icon': 'fa-ticket-alt'},
    {'name': 'Groceries', 'color': 'green', 'icon': 'fa-shopping-cart'},
    {'name': 'Health', 'color': 'red', 'icon': 'fa-medkit'},
    {'name': 'Sightseeing', 'color': 'amber', 'icon': 'fa-binoculars'},
    {'name': 'Souvenirs', 'color': 'teal', 'icon': 'fa-gift'},
    {'name': 'Other', 'color': 'gray', 'icon': 'fa-ellipsis-h'},
]

CATEGORY_NAMES = [category['name'] for category in EXPENSE_CATEGORIES]


def get_categories():
    return [dict(category) for category in EXPENSE_CATEGORIES]


def get_category(name):
    """Starter category by name, or the 'Other' styling for custom names."""
    for category in EXPENSE_CATEGORIES:
        if category['name'] == name:
            return dict(category)
    return {'name': name, 'color': 'gray', 'icon': 'fa-ellipsis-h'}
