"""View persistence: wholesale replacement on each build and the read queries page renderers use"""

from sqlmodel import Session, select

from mdsite.core.models import CardSummary, Collection, DocRef, NavigationEntry, NavScope, NavScopeKind
from mdsite.crud.models import BuildRow, CardRow, NavigationRow, TagEntryRow


def _card_row(card: CardSummary, position: int) -> CardRow:
    return CardRow(
        collection=card.collection.value,
        id=card.id,
        category=card.category,
        subcategory=card.subcategory,
        title=card.title,
        description=card.description,
        tags=list(card.tags),
        published_on=card.published_on,
        minutes_read=card.minutes_read,
        link=card.link,
        is_draft=card.is_draft,
        featured_rank=card.featured_rank,
        position=position,
    )


def _card(row: CardRow) -> CardSummary:
    return CardSummary(
        id=row.id,
        title=row.title,
        description=row.description,
        collection=Collection(row.collection),
        category=row.category,
        subcategory=row.subcategory,
        tags=tuple(row.tags or ()),
        published_on=row.published_on,
        minutes_read=row.minutes_read,
        link=row.link,
        is_draft=row.is_draft,
        featured_rank=row.featured_rank,
    )


def replace_views(session: Session, result) -> BuildRow:
    """Delete every stored view row and insert the views of result. Commits once.

    Views are never patched in place; a reader sees either the previous build or this one.
    """
    for table in (CardRow, NavigationRow, TagEntryRow):
        for row in session.exec(select(table)).all():
            session.delete(row)
    session.flush()

    for group in result.cards.collections.values():
        for position, card in enumerate(group.cards):
            session.add(_card_row(card, position))

    for scope, chain in result.navigation.chains.items():
        for position, entry in enumerate(chain):
            session.add(NavigationRow(
                scope=str(scope),
                document=entry.document.key,
                position=position,
                prev=entry.prev.key if entry.prev else None,
                next=entry.next.key if entry.next else None,
            ))

    registry = result.registries.tags
    for tag_id, refs in result.tags.entries.items():
        for position, ref in enumerate(refs):
            session.add(TagEntryRow(
                tag=tag_id, document=ref.key, name=registry.display_name(tag_id), position=position,
            ))

    build = BuildRow(
        digest=result.digest,
        build_mode=result.build_mode,
        documents=len(result.documents),
        errors=len(result.report.errors),
        warnings=len(result.report.warnings),
    )
    session.add(build)
    session.commit()
    session.refresh(build)
    return build


def get_cards(session: Session, collection: Collection, category: str = None) -> list[CardSummary]:
    """Cards of a collection (optionally one category) in resolved order."""
    stmt = select(CardRow).where(CardRow.collection == Collection(collection).value)
    if category is not None:
        stmt = stmt.where(CardRow.category == category)
    return [_card(row) for row in session.exec(stmt.order_by(CardRow.position)).all()]


def get_navigation(session: Session, ref: DocRef) -> list[NavigationEntry]:
    """Every chain entry of a document, ordered by scope."""
    rows = session.exec(
        select(NavigationRow).where(NavigationRow.document == ref.key).order_by(NavigationRow.scope)
    ).all()
    entries = []
    for row in rows:
        kind, _, key = row.scope.partition(":")
        entries.append(NavigationEntry(
            document=ref,
            scope=NavScope(kind=NavScopeKind(kind), key=key),
            prev=DocRef.parse(row.prev) if row.prev else None,
            next=DocRef.parse(row.next) if row.next else None,
        ))
    return entries


def get_tag_cards(session: Session, tag: str) -> list[CardSummary]:
    """Cards for a tag listing in resolved site order."""
    entries = session.exec(
        select(TagEntryRow).where(TagEntryRow.tag == tag).order_by(TagEntryRow.position)
    ).all()
    cards = []
    for entry in entries:
        ref = DocRef.parse(entry.document)
        row = session.get(CardRow, (ref.collection.value, ref.id))
        if row is not None:
            cards.append(_card(row))
    return cards


def list_collections(session: Session) -> list[str]:
    """Collections that have at least one stored card, in site order."""
    present = set(session.exec(select(CardRow.collection).distinct()).all())
    return [c.value for c in Collection if c.value in present]


def get_last_build(session: Session) -> BuildRow | None:
    return session.exec(select(BuildRow).order_by(BuildRow.id.desc())).first()
