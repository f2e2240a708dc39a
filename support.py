"""
Support ticket routes.

Tickets are created open, moved to in-progress and resolved by admins, who
may attach a reply. Deleted tickets go through the recycle bin like every
other entity.
"""

import logging

from fastapi import APIRouter, Depends

from context import AppContext, get_ctx
from crud import Resource, archive_and_delete, fetch_or_404
from database import NEWEST_FIRST, create_document, get_documents, to_object_id, update_document, utcnow
from errors import NotFoundError
from schemas import SupportTicket, SupportTicketUpdate

logger = logging.getLogger(__name__)

SUPPORT = Resource("support", "Ticket", SupportTicket, SupportTicketUpdate)

router = APIRouter(prefix="/api/support", tags=["Support"])


@router.get("")
def list_tickets(ctx: AppContext = Depends(get_ctx)):
    docs = get_documents(ctx.db, SUPPORT.collection, sort=NEWEST_FIRST)
    return [SUPPORT.serialize(d) for d in docs]


@router.get("/{ticket_id}")
def get_ticket(ticket_id: str, ctx: AppContext = Depends(get_ctx)):
    return SUPPORT.serialize(fetch_or_404(ctx, SUPPORT.collection, SUPPORT.label, ticket_id))


@router.post("")
def create_ticket(payload: SupportTicket, ctx: AppContext = Depends(get_ctx)):
    data = payload.model_dump()
    data["status"] = "open"
    data["adminReply"] = ""
    ticket = create_document(ctx.db, SUPPORT.collection, data)

    ctx.notifications.create("New Support Ticket", f"Ticket: {ticket['subject']}", "info")
    ctx.activity.log(payload.name or "User", "CREATE", "Support", f"Ticket created: {ticket['subject']}")
    return SUPPORT.serialize(ticket)


@router.put("/{ticket_id}")
def update_ticket(ticket_id: str, payload: SupportTicketUpdate, ctx: AppContext = Depends(get_ctx)):
    oid = to_object_id(ticket_id)
    if oid is None:
        raise NotFoundError(SUPPORT.label, ticket_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    changes["updatedAt"] = utcnow()
    ticket = update_document(ctx.db, SUPPORT.collection, oid, changes)
    if ticket is None:
        raise NotFoundError(SUPPORT.label, ticket_id)

    subject = ticket.get("subject", "")
    notified = False
    if changes.get("status") == "resolved":
        ctx.notifications.create("Ticket Resolved", f"Resolved: {subject}", "success")
        notified = True
    if changes.get("adminReply"):
        ctx.notifications.create("Support Reply", f"Reply to: {subject}", "info")
        notified = True
    if not notified:
        ctx.notifications.create("Ticket Updated", f"Updated: {subject}", "info")
    ctx.activity.log(ctx.settings.activity_actor, "UPDATE", "Support", f"Updated ticket {ticket_id}")
    return SUPPORT.serialize(ticket)


@router.delete("/{ticket_id}")
def delete_ticket(ticket_id: str, ctx: AppContext = Depends(get_ctx)):
    ticket = archive_and_delete(ctx, SUPPORT.collection, SUPPORT.label, ticket_id)
    ctx.notifications.create("Ticket Deleted", f"Deleted: {ticket.get('subject', '')}", "warning")
    ctx.activity.log(ctx.settings.activity_actor, "DELETE", "Support", f"Deleted ticket {ticket_id}")
    return {"success": True}
