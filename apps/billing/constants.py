"""
Bill taxonomy.

Each category has a closed list of account types. The strings are the ones
printed on receipts and stored on every bill, so they must not be reworded.
"""

# Amounts are rendered in words up to 99 Crore.
MAX_AMOUNT = 10 ** 9

ACCOUNT_TYPES = {
    'Jamaath': (
        'Dua_Friday',
        'Donation',
        'Sunnath Fee',
        'Marriage Fee',
        'Product Turnover',
        'Rental_Basis',
        'Devotional Dedication',
        'Dead Fee',
        'New Membership',
        'Certificate Fee',
        'Eid ul Adha',
        'Eid al-Fitr',
    ),
    'Madrassa': (
        'Annual Fee',
        'Monthly Fee',
        'Madrassa Building',
        'Madrassa Others',
    ),
    'Land': (
        'Land Purchase',
        'Land & Maintenance',
        'Building & Maintenance',
        'Land Others',
    ),
    'Nercha': (
        'Ramadhan',
        '27_Ravu',
        'Meladhun Nabi',
        'Others',
    ),
    'Sadhu': (
        'Sadhu Sahayam',
        'Building Maintenance',
        'General Expenses',
        'Others',
    ),
}

NOTES_MAX_LENGTH = 500
