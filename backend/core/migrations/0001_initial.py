from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Author',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('post_id', models.BigIntegerField(db_index=True, help_text='ID of original message.')),
                ('author_id', models.BigIntegerField(help_text='ID of chat the message came from.')),
            ],
            options={
                'db_table': 'authors',
            },
        ),
        migrations.CreateModel(
            name='Like',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('post_id', models.BigIntegerField(help_text='Telegram message ID in target chat.')),
                ('reaction_type', models.SmallIntegerField(help_text='Index in reactions list.')),
                ('user_id', models.BigIntegerField()),
            ],
            options={
                'db_table': 'likes',
            },
        ),
        migrations.CreateModel(
            name='UnsupportedMessage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('forwarded_post_id', models.BigIntegerField(db_index=True)),
                ('keyboard_post_id', models.BigIntegerField()),
            ],
            options={
                'db_table': 'unsupported_messages',
                'ordering': ('id',),
            },
        ),
        migrations.AddIndex(
            model_name='like',
            index=models.Index(fields=['post_id', 'user_id'], name='likes_post_user_idx'),
        ),
    ]
