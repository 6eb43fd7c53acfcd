"""Order confirmation: sent once an order has been placed."""


class OrderConfirmationTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        currency = context.get("currency", "USD")
        lines = "\n".join(
            f"  {item['quantity']} x {item['title']} @ {currency} {item['unit_price']}"
            for item in context.get("items", [])
        )
        discount = context.get("discount")
        discount_line = f"Discount: -{currency} {discount}\n" if discount and discount != "0.00" else ""
        return {
            "subject": f"Order Confirmation - #{order_number}",
            "body": (
                f"Thank you for your order #{order_number}.\n\n"
                f"{lines}\n\n"
                f"Subtotal: {currency} {context.get('subtotal', '0.00')}\n"
                f"{discount_line}"
                f"Total: {currency} {context.get('total', '0.00')}\n\n"
                "We'll send you another email when your order ships."
            ),
        }
