"""Merging of per-type link collections.

All functions are pure: inputs are never mutated, new containers are
returned.
"""

from __future__ import annotations

import dataclasses
from typing import Iterable, Mapping

from cloudseek.domain.entities.search import Link, MergedLinks, SearchResult


def merge_merged_by_type(
    target: MergedLinks, incoming: MergedLinks | None
) -> MergedLinks:
    """Append *incoming* links onto *target*, de-duplicated by URL per type.

    Returns *target* itself when there is nothing to merge. Otherwise a
    fresh mapping: target-only types are carried over, shared types keep
    the target links first followed by unseen incoming links in incoming
    order.
    """
    if incoming is None:
        return target

    out: MergedLinks = {t: list(links) for t, links in target.items()}
    for link_type, links in incoming.items():
        merged = out.get(link_type, [])
        seen = {link.url for link in merged}
        for link in links:
            if link.url not in seen:
                seen.add(link.url)
                merged.append(link)
        out[link_type] = merged
    return out


def group_links_by_type(results: Iterable[SearchResult]) -> MergedLinks:
    """Bucket the links of *results* by storage type.

    Each link is copied with the owning result's title and datetime and
    the channel as ``source``, unless the link already carries them.
    URLs are unique within a bucket (first occurrence wins).
    """
    grouped: MergedLinks = {}
    seen: dict[str, set[str]] = {}
    for result in results:
        for link in result.links:
            urls = seen.setdefault(link.type, set())
            if link.url in urls:
                continue
            urls.add(link.url)
            grouped.setdefault(link.type, []).append(
                dataclasses.replace(
                    link,
                    title=link.title or result.title,
                    datetime=link.datetime or result.datetime,
                    source=link.source or result.channel,
                )
            )
    return grouped


def filter_merged_by_cloud_types(
    merged: Mapping[str, list[Link]], cloud_types: Iterable[str] | None
) -> MergedLinks:
    """Keep only the requested types. An empty filter keeps everything."""
    wanted = {t.strip().lower() for t in cloud_types or () if t and t.strip()}
    if not wanted:
        return {t: list(links) for t, links in merged.items()}
    return {t: list(links) for t, links in merged.items() if t in wanted}


def count_merged_links(merged: Mapping[str, list[Link]]) -> int:
    return sum(len(links) for links in merged.values())
