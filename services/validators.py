import logging

from dtos.validator import ValidatorPage
from services.errors import FetchError, NodeRpcError

logger = logging.getLogger(__name__)

# maximum entries the validators RPC accepts per page
MAX_PER_PAGE = 100


class ValidatorSetCollector:
    """Drives the paged ``validators`` query until the whole set is collected."""

    def __init__(self, client, per_page: int = MAX_PER_PAGE):
        if not 1 <= per_page <= MAX_PER_PAGE:
            raise ValueError(f"per_page must be between 1 and {MAX_PER_PAGE}")
        self.client = client
        self.per_page = per_page

    async def collect(self, height: int) -> ValidatorPage:
        vals = ValidatorPage(block_height=height)
        seen = set()
        total = None

        page = 1
        stop = False
        while not stop:
            try:
                result = await self.client.get_validators(height, page, self.per_page)
            except NodeRpcError as e:
                raise FetchError(
                    f"error while getting validators at height {height}, page {page}",
                    page=page,
                    height=height,
                    total=total,
                ) from e

            if total is not None and result.total != total:
                raise FetchError(
                    f"validator total at height {height} changed from {total} "
                    f"to {result.total} on page {page}",
                    page=page,
                    height=height,
                    total=total,
                )
            total = result.total

            for validator in result.validators:
                if validator.address in seen:
                    logger.warning(
                        "dropping duplicate validator %s at height %d, page %d",
                        validator.address,
                        height,
                        page,
                    )
                    continue
                seen.add(validator.address)
                vals.validators.append(validator)

            vals.count += result.count
            vals.total = total
            logger.debug(
                "validators at height %d: page %d, %d/%d", height, page, vals.count, total
            )

            if vals.count > total:
                raise FetchError(
                    f"validators at height {height} overshoot total: {vals.count} > {total}",
                    page=page,
                    height=height,
                    total=total,
                )
            if vals.count < total and result.count == 0:
                raise FetchError(
                    f"empty validators page {page} at height {height} before reaching total {total}",
                    page=page,
                    height=height,
                    total=total,
                )

            page += 1
            stop = vals.count == total

        if len(vals.validators) != total:
            raise FetchError(
                f"collected {len(vals.validators)} distinct validators at height {height}, "
                f"node reported {total}",
                height=height,
                total=total,
            )

        logger.info("collected %d validators at height %d", total, height)
        return vals
