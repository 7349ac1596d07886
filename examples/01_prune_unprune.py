"""
Example 01: Prune and Unprune

This example demonstrates turning a cyclic entity graph into a JSON-safe snapshot
and restoring it before it goes back to the persistence layer.
"""

from entity_pruner import (
    EntityPruner,
    InMemoryAdapter,
    PrunableEntity,
    collection,
    reference,
)
from dataclasses import asdict, dataclass
from typing import Optional, List
import json


@dataclass(eq=False)
class Customer(PrunableEntity):
    """Customer entity"""
    id: Optional[int] = None
    name: Optional[str] = None


@dataclass(eq=False)
class Order(PrunableEntity):
    """Order entity with a bidirectional lines collection"""
    id: Optional[int] = None
    number: Optional[str] = None
    customer: Optional[Customer] = reference(Customer)
    lines: Optional[List["OrderLine"]] = collection("OrderLine", mapped_by="order")


@dataclass(eq=False)
class OrderLine(PrunableEntity):
    """Order line pointing back at its order"""
    id: Optional[int] = None
    sku: Optional[str] = None
    quantity: int = 0
    order: Optional[Order] = reference(Order)


def main():
    # Rows the "session" can load on demand
    customers = {7: Customer(id=7, name="ACME")}

    def load(target, identifier):
        print(f"  (loading {target.__name__} #{identifier})")
        return customers[identifier]

    adapter = InMemoryAdapter(loader=load)
    pruner = EntityPruner(adapter)

    # Build a graph: the customer is still an unloaded placeholder
    order = Order(id=1, number="SO-1001")
    order.customer = adapter.create_placeholder(Customer, 7)
    order.lines = [
        OrderLine(id=10, sku="BOLT-M6", quantity=100, order=order),
        OrderLine(id=11, sku="NUT-M6", quantity=100, order=order),
    ]

    print("=== Prune ===\n")

    pruner.prune(order)
    print(f"Order state: {order.pruning_state.value}")
    print(f"Customer after prune: {order.customer}")
    print(f"Stripped reference ids: {order.field_id_map}")
    print(f"Line back-references: {[line.order for line in order.lines]}\n")

    # The graph is now acyclic and serializes without a custom encoder
    payload = json.dumps(asdict(order), indent=2)
    print(f"Snapshot:\n{payload}\n")

    print("=== Unprune ===\n")

    # Pretend the client sent the snapshot back with a change
    order.lines[0].quantity = 250

    pruner.unprune(order)
    print(f"Order state: {order.pruning_state.value}")
    print(f"Customer placeholder: {order.customer!r}")
    print(f"Line back-references restored: {all(line.order is order for line in order.lines)}")

    customer = pruner.deproxy(order.customer)
    print(f"Customer name: {customer.name}")


if __name__ == "__main__":
    main()
