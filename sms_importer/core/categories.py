"""Category descriptors emitted by the parsers.

The importer does not own a category registry; these are the fixed identifiers the
wallet application already knows about.
"""

from sms_importer.core.models import Category

OTHER = Category(id="other", parent_id="other", name="Other", icon="ic020")
TRANSFER = Category(id="transfer", parent_id="expenses", name="Transfer", icon="ic023")
RECEIVED = Category(id="received", parent_id="income", name="Received Money", icon="ic024")
ATM_WITHDRAWAL = Category(id="withdrawal", parent_id="expenses", name="ATM Withdrawal", icon="ic014")
CASH_DEPOSIT = Category(id="deposit", parent_id="income", name="Cash Deposit", icon="ic025")
CARD_PAYMENT = Category(id="card_payment", parent_id="expenses", name="Card Payment", icon="ic015")
PAYMENT = Category(id="payment", parent_id="expenses", name="Payment", icon="ic001")
ELECTRICITY = Category(id="electricity", parent_id="expenses", name="Electricity", icon="ic008")
AIRTIME = Category(id="airtime", parent_id="expenses", name="Airtime", icon="ic019")
MERCHANT_PAYMENT = Category(id="merchant_payment", parent_id="expenses", name="others", icon="ic002")
AGENT_WITHDRAWAL = Category(id="agent_withdrawal", parent_id="expenses", name="Cash Withdrawal", icon="ic014")
