from __future__ import annotations

from ...constants import EXPENSES
from ...state.adapters import adapt_expense, expense_category
from ...utils.helpers import now_iso, temp_key, today_str
from ...utils.validators import is_missing_id
from ..base_module import NumberedModule, unwrap_record


class ExpenseController(NumberedModule):
    """
    Expenses (EXP-NNNN), addressed by expenseNumber.

    categoryType is always one of the fixed expense categories; anything
    else is filed under Other. add_expense() shows the record immediately
    and removes it again if the backend rejects it.
    """

    resource = EXPENSES
    label = "expenses"
    noun = "Expense"
    adapt = staticmethod(adapt_expense)

    def prepare(self, payload: dict) -> dict:
        body = super().prepare(payload)
        if "categoryType" in body or "amount" in body:
            body["categoryType"] = expense_category(body.get("categoryType"))
        return body

    async def add_expense(self, entry: dict) -> dict:
        body = self.prepare(entry)
        if is_missing_id(body.get(self.key_field)):
            body[self.key_field] = await self.next_number()
        body.setdefault("date", today_str())
        local = {**body, "id": temp_key("exp"), "createdAt": now_iso()}
        temp_id = local["id"]

        def apply(resp):
            saved = self.adapt({**local, **unwrap_record(resp)})
            self.store.replace_where(self.resource, lambda r: r.get("id") == temp_id, lambda _r: saved)
            return saved

        return await self._submit(
            "add",
            lambda: self.api.create(body),
            apply,
            optimistic=lambda: self.store.prepend(self.resource, self.adapt(local)),
            ok_title="Expense Added",
            ok_message=f"Expense {body[self.key_field]} saved",
            fail_title="Expense Persist Failed",
            extra={"number": body[self.key_field]},
        )

