# erp_client/constants.py
DEFAULT_API_BASE_URL = "http://localhost:3000"
API_BASE_URL_ENV = "ERP_API_BASE_URL"

# ---- Resource keys (one per store collection) ----
INVENTORY = "inventory"
CUSTOMERS = "customers"
SUPPLIERS = "suppliers"
CATEGORIES = "categories"
SALES = "sales"
SALE_RETURNS = "sale_returns"
QUOTATIONS = "quotations"
PURCHASES = "purchases"
PURCHASE_INVOICES = "purchase_invoices"
GRNS = "grns"
PURCHASE_RETURNS = "purchase_returns"
EXPENSES = "expenses"
RECEIPT_VOUCHERS = "receipt_vouchers"
PAYMENT_VOUCHERS = "payment_vouchers"
SUPPLIER_CREDITS = "supplier_credits"

RESOURCE_KEYS = (
    INVENTORY,
    CUSTOMERS,
    SUPPLIERS,
    CATEGORIES,
    SALES,
    SALE_RETURNS,
    QUOTATIONS,
    PURCHASES,
    PURCHASE_INVOICES,
    GRNS,
    PURCHASE_RETURNS,
    EXPENSES,
    RECEIPT_VOUCHERS,
    PAYMENT_VOUCHERS,
    SUPPLIER_CREDITS,
)

# ---- Expenses ----
EXPENSE_CATEGORIES = (
    "Rent",
    "Utilities",
    "Transportation",
    "Salary",
    "Maintenance",
    "Other",
)
DEFAULT_EXPENSE_CATEGORY = "Other"

# ---- Customers / suppliers ----
PAYMENT_TYPES = ("Credit", "Debit")

# ---- Notification colours ----
COLOR_SUCCESS = "green"
COLOR_INFO = "blue"
COLOR_WARNING = "orange"
COLOR_ERROR = "red"
