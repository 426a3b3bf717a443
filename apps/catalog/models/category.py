from django.core.exceptions import ValidationError
from django.db import models

from apps.catalog.utils import unique_slug


class Category(models.Model):
    """
    Two-level product categories: a root group and its sub-categories.
    Examples: Dụng cụ điện > Máy khoan

    Only root categories can be parents, so a category path is at most
    "Root > Child".
    """
    name = models.CharField(
        max_length=200,
        verbose_name='Tên'
    )
    slug = models.SlugField(
        max_length=200,
        unique=True,
        verbose_name='Slug'
    )
    parent = models.ForeignKey(
        'self',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        limit_choices_to={'parent__isnull': True},
        related_name='children',
        verbose_name='Danh mục cha'
    )
    description = models.TextField(
        blank=True,
        verbose_name='Mô tả'
    )
    is_active = models.BooleanField(
        default=True,
        verbose_name='Hoạt động'
    )
    display_order = models.PositiveIntegerField(
        default=0,
        verbose_name='Thứ tự hiển thị'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['display_order', 'name']
        verbose_name = 'Danh mục'
        verbose_name_plural = 'Danh mục'

    def __str__(self):
        return self.full_path

    @property
    def is_root(self):
        return self.parent_id is None

    @property
    def level(self):
        return 0 if self.is_root else 1

    @property
    def full_path(self):
        if self.parent is None:
            return self.name
        return f"{self.parent.name} > {self.name}"

    def subtree_ids(self):
        """This category and its sub-categories, for product filtering."""
        return [self.pk] + list(self.children.values_list('pk', flat=True))

    def parent_error(self, parent):
        """
        Reason ``parent`` cannot be this category's parent, or None.

        Covers the category itself, non-root parents (which also covers every
        sub-category of this one) and categories that already have children.
        """
        if parent is None:
            return None
        if self.pk is not None and parent.pk == self.pk:
            return 'Danh mục không thể là cha của chính nó.'
        if parent.parent_id is not None:
            return 'Chỉ danh mục gốc mới có thể làm danh mục cha.'
        if self.pk is not None and self.children.exists():
            return 'Danh mục đang có danh mục con nên không thể đặt làm danh mục con.'
        return None

    def clean(self):
        error = self.parent_error(self.parent)
        if error:
            raise ValidationError({'parent': error})

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(Category, self.name, instance_pk=self.pk, fallback='danh-muc')
        super().save(*args, **kwargs)
