"""ReportProperty and ReportComment — flag content for human moderation.

Reports are append-only and never de-duplicated: the same user may report the
same listing or review any number of times.
"""

from protean.fields import Identifier, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from listings.domain import listings
from listings.property.property import Property


@listings.command(part_of="Property")
class ReportProperty:
    property_id = Identifier(required=True)
    reporter_id = Identifier(required=True)
    reason = Text()


@listings.command(part_of="Property")
class ReportComment:
    property_id = Identifier(required=True)
    review_id = Identifier(required=True)
    reporter_id = Identifier(required=True)
    reason = Text()


@listings.command_handler(part_of=Property)
class ReportCommandHandler:
    @handle(ReportProperty)
    def report_property(self, command):
        repo = current_domain.repository_for(Property)
        listing = repo.get(command.property_id)
        report = listing.report_property(reporter_id=command.reporter_id, reason=command.reason)
        repo.add(listing)
        return report

    @handle(ReportComment)
    def report_comment(self, command):
        repo = current_domain.repository_for(Property)
        listing = repo.get(command.property_id)
        report = listing.report_comment(
            review_id=command.review_id,
            reporter_id=command.reporter_id,
            reason=command.reason,
        )
        repo.add(listing)
        return report
