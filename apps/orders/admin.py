from django.contrib import admin

from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ['product', 'variant', 'quantity', 'price', 'subtotal']
    readonly_fields = ['subtotal']
    autocomplete_fields = ['product', 'variant']

    def subtotal(self, obj):
        if obj.pk is None:
            return '-'
        return f'{obj.subtotal:,.0f} đ'
    subtotal.short_description = 'Thành tiền'


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['code', 'customer_name', 'customer_phone', 'status', 'total_amount', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['code', 'customer_name', 'customer_phone']
    readonly_fields = ['code', 'total_amount', 'created_at', 'updated_at']
    date_hierarchy = 'created_at'
    inlines = [OrderItemInline]

    actions = ['mark_confirmed', 'mark_shipping', 'mark_completed', 'mark_cancelled']

    def save_related(self, request, form, formsets, change):
        super().save_related(request, form, formsets, change)
        form.instance.recalculate_total()

    def _set_status(self, request, queryset, status):
        count = queryset.update(status=status)
        label = dict(Order.STATUS_CHOICES)[status]
        self.message_user(request, f'{count} đơn hàng chuyển sang "{label}".')

    @admin.action(description='Xác nhận đơn hàng')
    def mark_confirmed(self, request, queryset):
        self._set_status(request, queryset, 'confirmed')

    @admin.action(description='Chuyển sang đang giao')
    def mark_shipping(self, request, queryset):
        self._set_status(request, queryset, 'shipping')

    @admin.action(description='Hoàn thành đơn hàng')
    def mark_completed(self, request, queryset):
        self._set_status(request, queryset, 'completed')

    @admin.action(description='Hủy đơn hàng')
    def mark_cancelled(self, request, queryset):
        self._set_status(request, queryset, 'cancelled')
