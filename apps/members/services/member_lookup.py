"""Member lookup service."""

from apps.members.models import Member

from .exceptions import MemberNotFoundError


def get_member(*, mahal_id: str) -> Member:
    """
    Get an active member by Mahal ID.

    Args:
        mahal_id: Household id in ``ward/house`` form

    Returns:
        Member instance

    Raises:
        MemberNotFoundError: If no active member has this id
    """
    try:
        return Member.objects.get(mahal_id=mahal_id.strip(), is_active=True)
    except Member.DoesNotExist:
        raise MemberNotFoundError(f"Member {mahal_id} not found")


def format_member_address(member: Member) -> str:
    """
    Build the address block printed on receipts.

    Lines: name, street address, Mahal ID, phone. Empty address or phone
    lines are left out.
    """
    lines = [member.name]
    if member.address:
        lines.append(member.address.strip())
    lines.append(f"Mahal ID: {member.mahal_id}")
    if member.phone:
        lines.append(f"Phone: {member.phone}")
    return '\n'.join(lines)
