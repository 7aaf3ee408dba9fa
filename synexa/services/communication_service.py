"""
Communication Service - internal messaging

Broadcast messages are fanned out to MessageRecipient rows when created;
the audience list decides who receives them. Threads are private
conversations and notices form the bulletin shown on the parent portal.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, case, or_, and_, cast, String
from sqlalchemy.orm import selectinload
from datetime import datetime, date, time
from typing import Optional, Set

from synexa.core.exceptions import AuthorizationError, ResourceNotFoundError, ValidationError
from synexa.core.logging_config import get_logger
from synexa.models.communication import (
    CommunicationMessage,
    MessageAudience,
    MessagePriority,
    MessageRecipient,
    MessageThread,
    SchoolNotice,
    ThreadMessage,
)
from synexa.models.school_class import SchoolClass, class_teachers
from synexa.models.student import Student, parent_students
from synexa.models.teacher import Teacher
from synexa.models.user import User, UserRole, STAFF_ROLES
from synexa.schemas.communication import MessageCreate, MessageUpdate, ThreadCreate, NoticeCreate
from synexa.utils.pagination import paginate

logger = get_logger(__name__)

PREVIEW_LENGTH = 100
MESSAGE_MANAGERS = (UserRole.ADMIN, UserRole.DIRETOR)

priority_rank = case(
    {
        MessagePriority.URGENT: 4,
        MessagePriority.HIGH: 3,
        MessagePriority.NORMAL: 2,
        MessagePriority.LOW: 1,
    },
    value=CommunicationMessage.priority,
    else_=0,
)


def preview(content: str) -> str:
    if len(content) <= PREVIEW_LENGTH:
        return content
    return content[:PREVIEW_LENGTH] + "..."


def audience_filter(audience: MessageAudience):
    """Match messages whose JSON audience list contains the given value"""
    return cast(CommunicationMessage.audience, String).like(f'%"{audience.value}"%')


class CommunicationService:

    # ------------------------------------------------------------------
    # Recipients
    # ------------------------------------------------------------------

    async def _users_with_roles(self, db: AsyncSession, roles) -> Set[str]:
        result = await db.execute(
            select(User.id).where(User.role.in_(roles), User.is_active == True)  # noqa: E712
        )
        return {row[0] for row in result.all()}

    async def _class_recipients(self, db: AsyncSession, class_id: str) -> Set[str]:
        if not await db.get(SchoolClass, class_id):
            raise ResourceNotFoundError("Class", class_id)

        parents = await db.execute(
            select(parent_students.c.parent_id)
            .join(Student, Student.id == parent_students.c.student_id)
            .where(Student.class_id == class_id)
        )
        teachers = await db.execute(
            select(Teacher.user_id)
            .join(class_teachers, class_teachers.c.teacher_id == Teacher.id)
            .where(class_teachers.c.class_id == class_id)
        )
        return {row[0] for row in parents.all()} | {row[0] for row in teachers.all()}

    async def resolve_recipients(self, db: AsyncSession, data: MessageCreate) -> Set[str]:
        recipients: Set[str] = set()

        for audience in data.audience:
            if audience == MessageAudience.PARENTS:
                recipients |= await self._users_with_roles(db, [UserRole.PARENT])
            elif audience == MessageAudience.TEACHERS:
                recipients |= await self._users_with_roles(db, [UserRole.PROFESSOR])
            elif audience == MessageAudience.ALL_STAFF:
                recipients |= await self._users_with_roles(db, list(STAFF_ROLES))
            elif audience == MessageAudience.SPECIFIC_CLASS:
                if not data.class_id:
                    raise ValidationError("class_id é obrigatório para o público SPECIFIC_CLASS", field="class_id")
                recipients |= await self._class_recipients(db, data.class_id)
            elif audience in (MessageAudience.INDIVIDUAL, MessageAudience.GROUP):
                if not data.target_users:
                    raise ValidationError(
                        f"target_users é obrigatório para o público {audience.value}", field="target_users"
                    )
                result = await db.execute(select(User.id).where(User.id.in_(data.target_users)))
                found = {row[0] for row in result.all()}
                missing = set(data.target_users) - found
                if missing:
                    raise ValidationError(f"Utilizadores não encontrados: {', '.join(sorted(missing))}")
                recipients |= found

        return recipients

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    async def _load(self, db: AsyncSession, message_id: str) -> CommunicationMessage:
        result = await db.execute(
            select(CommunicationMessage)
            .where(CommunicationMessage.id == message_id, CommunicationMessage.is_deleted == False)  # noqa: E712
            .execution_options(populate_existing=True)
        )
        message = result.scalar_one_or_none()
        if not message:
            raise ResourceNotFoundError("Message", message_id)
        return message

    async def create_message(self, db: AsyncSession, data: MessageCreate, sender: User) -> CommunicationMessage:
        recipient_ids = await self.resolve_recipients(db, data)
        recipient_ids.discard(sender.id)
        if not recipient_ids:
            raise ValidationError("Nenhum destinatário encontrado para o público selecionado")

        message = CommunicationMessage(
            title=data.title,
            content=data.content,
            priority=data.priority,
            audience=[a.value for a in data.audience],
            class_id=data.class_id,
            created_by=sender.id,
            expires_at=data.expires_at,
            recipients=[MessageRecipient(user_id=user_id) for user_id in sorted(recipient_ids)],
        )
        db.add(message)
        await db.commit()

        logger.log_audit_event(
            "create", "message", str(message.id),
            actor_id=sender.id, recipients=len(recipient_ids), priority=data.priority.value,
        )
        return await self._load(db, message.id)

    def _inbox_query(self, user_id: str):
        return (
            select(CommunicationMessage)
            .join(MessageRecipient, MessageRecipient.message_id == CommunicationMessage.id)
            .where(MessageRecipient.user_id == user_id, CommunicationMessage.is_deleted == False)  # noqa: E712
        )

    async def inbox(
        self,
        db: AsyncSession,
        user: User,
        page: int = 1,
        page_size: int = 20,
        priority: Optional[MessagePriority] = None,
        audience: Optional[MessageAudience] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        unread_only: bool = False,
        search: Optional[str] = None,
        include_expired: bool = False,
    ) -> dict:
        now = datetime.utcnow()
        query = self._inbox_query(user.id)

        if priority:
            query = query.where(CommunicationMessage.priority == priority)
        if audience:
            query = query.where(audience_filter(audience))
        if start_date:
            query = query.where(CommunicationMessage.created_at >= datetime.combine(start_date, time.min))
        if end_date:
            query = query.where(CommunicationMessage.created_at <= datetime.combine(end_date, time.max))
        if unread_only:
            query = query.where(MessageRecipient.read_at.is_(None))
        if search:
            term = f"%{search}%"
            query = query.where(or_(
                CommunicationMessage.title.ilike(term),
                CommunicationMessage.content.ilike(term),
            ))
        if not include_expired:
            query = query.where(or_(
                CommunicationMessage.expires_at.is_(None),
                CommunicationMessage.expires_at > now,
            ))

        query = query.order_by(priority_rank.desc(), CommunicationMessage.created_at.desc())
        result = await paginate(db, query, page, page_size)

        items = []
        for message in result["items"]:
            receipt = next((r for r in message.recipients if r.user_id == user.id), None)
            items.append({
                "id": message.id,
                "title": message.title,
                "preview": preview(message.content),
                "priority": message.priority,
                "audience": message.audience,
                "creator": message.creator,
                "is_read": receipt is not None and receipt.read_at is not None,
                "read_at": receipt.read_at if receipt else None,
                "is_expired": message.is_expired,
                "created_at": message.created_at,
            })
        result["items"] = items
        result["summary"] = await self.inbox_summary(db, user.id)
        return result

    async def inbox_summary(self, db: AsyncSession, user_id: str) -> dict:
        now = datetime.utcnow()
        result = await db.execute(
            select(
                func.count(CommunicationMessage.id),
                func.sum(case((MessageRecipient.read_at.is_(None), 1), else_=0)),
                func.sum(case((CommunicationMessage.priority == MessagePriority.URGENT, 1), else_=0)),
                func.sum(case((and_(
                    CommunicationMessage.expires_at.is_not(None),
                    CommunicationMessage.expires_at <= now,
                ), 1), else_=0)),
            )
            .select_from(CommunicationMessage)
            .join(MessageRecipient, MessageRecipient.message_id == CommunicationMessage.id)
            .where(MessageRecipient.user_id == user_id, CommunicationMessage.is_deleted == False)  # noqa: E712
        )
        total, unread, urgent, expired = result.one()
        return {
            "total_messages": total or 0,
            "unread_messages": unread or 0,
            "urgent_messages": urgent or 0,
            "expired_messages": expired or 0,
        }

    async def get_message(self, db: AsyncSession, message_id: str) -> CommunicationMessage:
        return await self._load(db, message_id)

    async def mark_read(self, db: AsyncSession, message_id: str, user: User) -> MessageRecipient:
        message = await self._load(db, message_id)
        receipt = next((r for r in message.recipients if r.user_id == user.id), None)
        if not receipt:
            raise ResourceNotFoundError("Message recipient", message_id)

        if receipt.read_at is None:
            receipt.read_at = datetime.utcnow()
            await db.commit()
        return receipt

    def _ensure_can_manage(self, message: CommunicationMessage, user: User) -> None:
        if message.created_by != user.id and user.role not in MESSAGE_MANAGERS:
            raise AuthorizationError("Apenas o autor ou a direção podem alterar esta mensagem")

    async def update_message(
        self, db: AsyncSession, message_id: str, data: MessageUpdate, user: User
    ) -> CommunicationMessage:
        message = await self._load(db, message_id)
        self._ensure_can_manage(message, user)

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(message, field, value)
        await db.commit()

        logger.log_audit_event("update", "message", message_id, actor_id=user.id)
        return await self._load(db, message_id)

    async def delete_message(self, db: AsyncSession, message_id: str, user: User) -> None:
        message = await self._load(db, message_id)
        self._ensure_can_manage(message, user)

        message.is_deleted = True
        await db.commit()
        logger.log_audit_event("delete", "message", message_id, actor_id=user.id)

    async def sent(self, db: AsyncSession, user: User, page: int = 1, page_size: int = 20) -> dict:
        query = (
            select(CommunicationMessage)
            .where(CommunicationMessage.created_by == user.id, CommunicationMessage.is_deleted == False)  # noqa: E712
            .order_by(CommunicationMessage.created_at.desc())
        )
        return await paginate(db, query, page, page_size)

    async def stats(self, db: AsyncSession) -> dict:
        result = await db.execute(
            select(CommunicationMessage).where(CommunicationMessage.is_deleted == False)  # noqa: E712
        )
        messages = list(result.scalars().all())

        by_priority = {p.value: 0 for p in MessagePriority}
        by_audience = {a.value: 0 for a in MessageAudience}
        read_rates = []
        for message in messages:
            by_priority[message.priority.value] += 1
            for audience in message.audience or []:
                by_audience[audience] = by_audience.get(audience, 0) + 1
            if message.recipient_count:
                read_rates.append(message.read_count / message.recipient_count * 100)

        return {
            "total_messages": len(messages),
            "active_messages": sum(1 for m in messages if not m.is_expired),
            "average_read_rate": round(sum(read_rates) / len(read_rates), 1) if read_rates else 0.0,
            "by_priority": by_priority,
            "by_audience": by_audience,
        }

    # ------------------------------------------------------------------
    # Threads
    # ------------------------------------------------------------------

    async def _load_thread(self, db: AsyncSession, thread_id: str) -> MessageThread:
        result = await db.execute(
            select(MessageThread)
            .options(selectinload(MessageThread.messages))
            .where(MessageThread.id == thread_id)
            .execution_options(populate_existing=True)
        )
        thread = result.scalar_one_or_none()
        if not thread:
            raise ResourceNotFoundError("Thread", thread_id)
        return thread

    def _ensure_participant(self, thread: MessageThread, user: User) -> None:
        if not any(p.id == user.id for p in thread.participants):
            raise AuthorizationError("Não participa nesta conversa")

    async def create_thread(self, db: AsyncSession, data: ThreadCreate, sender: User) -> MessageThread:
        wanted = set(data.participant_ids) - {sender.id}
        if not wanted:
            raise ValidationError("Indique pelo menos um participante além do remetente", field="participant_ids")

        result = await db.execute(select(User).where(User.id.in_(wanted)))
        participants = list(result.scalars().all())
        missing = wanted - {u.id for u in participants}
        if missing:
            raise ValidationError(f"Participantes não encontrados: {', '.join(sorted(missing))}")

        now = datetime.utcnow()
        thread = MessageThread(
            subject=data.subject,
            created_by=sender.id,
            created_at=now,
            updated_at=now,
            participants=[sender] + participants,
            messages=[ThreadMessage(sender_id=sender.id, content=data.content, created_at=now)],
        )
        db.add(thread)
        await db.commit()

        logger.info(f"[Communication] Thread {thread.id} opened by {sender.id} with {len(participants)} participant(s)")
        return await self._load_thread(db, thread.id)

    async def list_threads(self, db: AsyncSession, user: User, page: int = 1, page_size: int = 20) -> dict:
        query = (
            select(MessageThread)
            .where(MessageThread.participants.any(User.id == user.id))
            .order_by(MessageThread.updated_at.desc())
        )
        return await paginate(db, query, page, page_size)

    async def get_thread(self, db: AsyncSession, thread_id: str, user: User) -> MessageThread:
        thread = await self._load_thread(db, thread_id)
        self._ensure_participant(thread, user)
        return thread

    async def reply(self, db: AsyncSession, thread_id: str, content: str, user: User) -> MessageThread:
        thread = await self.get_thread(db, thread_id, user)

        now = datetime.utcnow()
        thread.messages.append(ThreadMessage(sender_id=user.id, content=content, created_at=now))
        thread.updated_at = now
        await db.commit()
        return await self._load_thread(db, thread_id)

    # ------------------------------------------------------------------
    # Notices
    # ------------------------------------------------------------------

    async def create_notice(self, db: AsyncSession, data: NoticeCreate, author: User) -> SchoolNotice:
        notice = SchoolNotice(
            **data.model_dump(),
            author_id=author.id,
            published_at=datetime.utcnow() if data.published else None,
        )
        db.add(notice)
        await db.commit()

        logger.log_audit_event("create", "notice", str(notice.id), actor_id=author.id)
        result = await db.execute(
            select(SchoolNotice).where(SchoolNotice.id == notice.id).execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def list_notices(
        self, db: AsyncSession, page: int = 1, page_size: int = 20, published: Optional[bool] = None
    ) -> dict:
        query = select(SchoolNotice)
        if published is not None:
            query = query.where(SchoolNotice.published == published)
        query = query.order_by(SchoolNotice.created_at.desc())
        return await paginate(db, query, page, page_size)


communication_service = CommunicationService()
