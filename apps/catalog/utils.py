import json

from django.utils.text import slugify


def combination_key(attributes):
    """
    Canonical string form of a variant attribute map.

    Keys are sorted, so two maps with the same pairs produce the same key
    whatever their insertion order.
    """
    return json.dumps(attributes or {}, sort_keys=True, ensure_ascii=False, separators=(',', ':'))


def combination_label(attributes):
    """Human readable form: 'Đỏ / M'."""
    return ' / '.join(str(value) for value in (attributes or {}).values())


def make_slug(text, fallback='item'):
    # slugify() drops "đ" instead of transliterating it
    return slugify(str(text).replace('đ', 'd').replace('Đ', 'D')) or fallback


def unique_slug(model, text, instance_pk=None, fallback='item'):
    """Slug for ``text`` not yet used by another ``model`` row."""
    base_slug = make_slug(text, fallback=fallback)
    slug = base_slug
    counter = 1
    while model.objects.filter(slug=slug).exclude(pk=instance_pk).exists():
        slug = f"{base_slug}-{counter}"
        counter += 1
    return slug
