from django.core.management.base import BaseCommand, CommandError

from cms.errors import CmsError
from cms.services import blog_sync
from cms.services.content import invalidate_public_cache


class Command(BaseCommand):
    help = "Mirror WordPress posts into the blog table (all published posts, or one with --id)."

    def add_arguments(self, parser):
        parser.add_argument('--id', type=int, dest='wordpress_id', help='WordPress post id to sync')

    def handle(self, *args, **options):
        wordpress_id = options.get('wordpress_id')
        try:
            if wordpress_id:
                result = blog_sync.sync_post(wordpress_id)
                self.stdout.write(f"{result.action}: {result.title} (wordpress_id={wordpress_id})")
            else:
                summary = blog_sync.sync_all()
                for item in summary['results']:
                    line = f"{item['action']}: {item['title']} (wordpress_id={item['wordpress_id']})"
                    self.stdout.write(line if not item['error'] else f"{line} {item['error']}")
                self.stdout.write(
                    f"{summary['total']} posts, {summary['successCount']} synced, {summary['errorCount']} failed"
                )
        except CmsError as exc:
            raise CommandError(exc.message) from exc
        invalidate_public_cache()
        self.stdout.write(self.style.SUCCESS("Blog sync finished"))
